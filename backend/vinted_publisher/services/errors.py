"""Errors raised by the publishing pipeline.

Every one of these is caught by ``VintedPublisher.publish_article`` and turned
into a failed ``PublicationResult``; none of them reach the caller.
"""


class PublishError(Exception):
    """Base class for publishing failures"""
    pass


class InitializationError(PublishError):
    """Browser or page could not be made available"""
    pass


class AuthenticationError(PublishError):
    """Credentials were submitted but the member is still signed out"""
    pass


class NavigationError(PublishError):
    """The item creation page could not be opened"""
    pass


class PhotoUploadError(PublishError):
    """Attaching a photo to the creation form failed"""
    pass


class DownloadError(PublishError):
    """A remote photo could not be fetched"""
    pass


class FormFillError(PublishError):
    """Writing a form field failed"""
    pass


class SubmissionError(PublishError):
    """The form was submitted but no item page was reached"""

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out
