"""
Runtime validation of repository implementations against their Protocols.

Use cases call ``ensure_repository_protocol`` on every collaborator they
receive, so a misconfigured backend fails at wiring time rather than on the
first request.
"""

import logging
from typing import Type, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar("P")


class RepositoryValidationError(Exception):
    """Raised when repository contract validation fails"""

    pass


def validate_repository_protocol(
    repository: object, protocol: Type[P]
) -> None:
    """
    Validate that a repository implementation satisfies a protocol contract.

    Args:
        repository: The repository implementation to validate
        protocol: The @runtime_checkable protocol class to validate against

    Raises:
        RepositoryValidationError: If validation fails
    """
    if not isinstance(repository, protocol):
        logger.error(
            "Repository protocol validation failed",
            extra={
                "repository_type": type(repository).__name__,
                "protocol_name": protocol.__name__,
            },
        )
        raise RepositoryValidationError(
            f"Repository {type(repository).__name__} does not implement "
            f"{protocol.__name__} protocol. Missing or incorrect methods."
        )

    logger.debug(
        "Repository protocol validation passed",
        extra={
            "repository_type": type(repository).__name__,
            "protocol_name": protocol.__name__,
        },
    )


def ensure_repository_protocol(repository: object, protocol: Type[P]) -> P:
    """Validate and return a repository typed as the protocol."""
    validate_repository_protocol(repository, protocol)
    return repository  # type: ignore[return-value]
