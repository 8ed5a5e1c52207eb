"""Request header construction from the credential vault."""

from __future__ import annotations

import asyncio

from standup_dashboard.vault.credentials import CredentialStore

GITHUB_TOKEN_HEADER = "x-github-token"
LINEAR_API_KEY_HEADER = "x-linear-api-key"
GITHUB_ORG_HEADER = "x-github-org"


class HeaderInjector:
    """Builds the credential headers attached to every internal API call.

    A header is present only when its credential is configured; absence (never an
    empty value) means "not configured".
    """

    def __init__(self, credentials: CredentialStore) -> None:
        self._credentials = credentials

    async def get_token_headers(self) -> dict[str, str]:
        github_token, linear_api_key, github_org = await asyncio.gather(
            self._credentials.get_github_token(),
            self._credentials.get_linear_api_key(),
            self._credentials.get_github_org(),
        )

        headers: dict[str, str] = {}
        if github_token:
            headers[GITHUB_TOKEN_HEADER] = github_token
        if linear_api_key:
            headers[LINEAR_API_KEY_HEADER] = linear_api_key
        if github_org:
            headers[GITHUB_ORG_HEADER] = github_org
        return headers
