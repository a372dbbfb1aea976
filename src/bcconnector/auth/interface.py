"""
Authentication Interfaces

Defines contracts for access-token providers and interactive sign-in sources.
"""

from abc import ABC, abstractmethod


class ITokenProvider(ABC):
    """Interface for anything that hands out bearer tokens"""

    @abstractmethod
    async def get_access_token(self) -> str:
        """
        Get a currently valid access token.

        Returns:
            Bearer token for Business Central API access

        Raises:
            UnauthenticatedError: If no token can be obtained
            TransportError: If the token endpoint cannot be reached
        """
        pass

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """Whether a token is currently held"""
        pass


class IAuthorizationCodeSource(ABC):
    """Interface for the interactive browser/redirect step of the code flow"""

    @abstractmethod
    async def request_code(self, authorization_url: str) -> str:
        """
        Send the user to the authorize URL and wait for the redirect.

        Args:
            authorization_url: Fully built authorize endpoint URL

        Returns:
            The redirect URL the browser landed on, or the bare authorization code
        """
        pass
