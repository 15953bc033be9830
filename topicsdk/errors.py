"""Exception raised for conditions that abort the whole run."""


class TopicSdkError(Exception):
    """A fatal configuration, validation, or parse failure."""
