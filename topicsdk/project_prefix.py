"""Utility for determining the reference prefix of a project folder."""


def project_prefix(project_name: str) -> str:
    """Return the project name up to and including the first underscore.

    Returns an empty string when the name has no underscore.
    """
    return project_name[: project_name.find("_") + 1]
