"""Custom exception hierarchy for the site generator."""


class FolioError(Exception):
    """Base exception for all site generator errors."""

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message


class ConfigurationError(FolioError):
    """Site configuration error."""

    pass


class DuplicatePathError(ConfigurationError):
    """Two content files resolve to the same rendered path."""

    def __init__(self, rendered_path: str, first_source: str, second_source: str) -> None:
        super().__init__(
            f'"{first_source}" and "{second_source}" both render to "/{rendered_path}"'
        )
        self.rendered_path = rendered_path
        self.first_source = first_source
        self.second_source = second_source


class ContentParseError(FolioError):
    """Malformed front matter or body in a content file."""

    def __init__(self, source_path: str, reason: str) -> None:
        super().__init__(f'Unable to parse "{source_path}": {reason}')
        self.source_path = source_path
        self.reason = reason


class TemplateResolutionError(FolioError):
    """A page refers to a template that does not exist."""

    def __init__(self, source_path: str, template_name: str) -> None:
        super().__init__(
            f'the template "{template_name}" for the page "{source_path}" does not exist'
        )
        self.source_path = source_path
        self.template_name = template_name


class OutputWriteError(FolioError):
    """Writing a rendered page or copied file to the output directory failed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
        self.reason = reason


class BuildCommandError(FolioError):
    """A pre-build or post-build command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f'Build command "{command}" exited with status {returncode}')
        self.command = command
        self.returncode = returncode


class BuildError(FolioError):
    """A site build was aborted."""

    pass
