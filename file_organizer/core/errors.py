# file_organizer/core/errors.py


class OrganizerError(Exception):
    """Base error for the project."""


class ConfigurationError(OrganizerError):
    """The source path is missing, unreadable or not a directory."""


class DirectoryListingError(OrganizerError):
    """The source directory could not be listed."""


class DirectoryCreationError(OrganizerError):
    """A category sub-directory could not be created."""


class MoveError(OrganizerError):
    """A file could not be renamed into its category directory."""
