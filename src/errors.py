"""Exception hierarchy for the export pipeline.

``UserInputError`` subclasses are raised before anything is written and are
reported to the user as plain messages. Everything else is a fault in one of
the external collaborators and aborts the export.
"""

from __future__ import annotations


class OrgJekyllError(Exception):
    """Base error for orgjekyll."""


class UserInputError(OrgJekyllError):
    """The user asked for something the document cannot provide."""


class NotInPostError(UserInputError):
    """No enclosing entry with a task state was found."""


class HeadingNotFoundError(UserInputError):
    """A heading given as the cursor does not exist in the document."""


class MissingFilenameError(UserInputError):
    """A page was exported without a ``filename`` property."""


class ExporterError(OrgJekyllError):
    """The HTML exporter could not be run or failed."""


class FrontMatterError(OrgJekyllError):
    """Exporter output lacks the expected front-matter block."""
