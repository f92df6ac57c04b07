"""Session resolution."""

from src.xwing.auth.exceptions import InvalidSessionError, UnauthenticatedError
from src.xwing.auth.identity import IdentityStore
from src.xwing.auth.session import SessionCodec
from src.xwing.services.database import User


class AuthGate:
    """Resolves a session token to the user it belongs to. Never mutates."""

    def __init__(self, identity_store: IdentityStore, session_codec: SessionCodec):
        self.identity_store = identity_store
        self.session_codec = session_codec

    def resolve(self, session_token: str | None) -> User:
        """
        Resolve a session token to a user.

        Args:
            session_token: Raw session cookie value, if any

        Returns:
            The user named by the session

        Raises:
            UnauthenticatedError: If there is no token or no user ID can be read from it
            InvalidSessionError: If the user named by the session does not exist
            DatabaseError: If the identity store cannot be queried
        """
        if not session_token:
            raise UnauthenticatedError()

        user_id = self.session_codec.read(session_token)
        if not user_id:
            raise UnauthenticatedError()

        user = self.identity_store.get(user_id)
        if user is None:
            raise InvalidSessionError()

        return user
