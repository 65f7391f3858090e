"""
Username Resolution.

Maps the short username a person types at login to the account email the
identity provider authenticates against.  Read-only.
"""

from __future__ import annotations

from envirolens.errors import NotFoundError, TransportError
from envirolens.logger import StructuredLogger
from envirolens.repositories.user_repository import UserRepository
from envirolens.services.base_service import BaseService


class IdentityResolver(BaseService):
    """Resolves a username to its canonical account identifier.

    Parameters
    ----------
    repo:
        Repository over the ``users`` collection.
    logger:
        Structured logger.
    """

    def __init__(self, repo: UserRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo: UserRepository = repo

    def resolve(self, handle: str) -> str:
        """Return the email registered for *handle*.

        The first matching document wins.  Several matches mean the
        uniqueness check at registration was bypassed; that case is
        logged but still resolved.

        Raises:
            NotFoundError: No document matches, or the first one has no
                email.
            TransportError: The lookup failed or its response could not
                be decoded.
        """
        try:
            emails = self._repo.emails_for_username(handle)
        except Exception as exc:
            self._logger.warning(
                "Username lookup failed for %s: %s", handle, exc,
                extra={"event": "RESOLVE_FAILED"},
            )
            raise TransportError(original_error=exc) from exc

        if not emails or emails[0] is None:
            self._logger.info("Username %s not found.", handle)
            raise NotFoundError()

        if len(emails) > 1:
            self._logger.warning(
                "Username %s matches %d profiles; using the first.",
                handle,
                len(emails),
                extra={"event": "AMBIGUOUS_USERNAME"},
            )

        return emails[0]
