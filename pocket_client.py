#!/usr/bin/env python3
"""
Pocket client: three-legged authorization and item creation.

Authorization runs in three steps:
    1. obtain_request_token()   -> request token held in memory
    2. build_authorization_url() -> link the user opens to grant access
    3. complete_authorization()  -> access token persisted to the settings store

All credential state belongs to the PocketClient instance. Use one
instance per session, or wrap the three steps in authorization_attempt()
when several threads share an instance.
"""

import logging
import threading
from contextlib import contextmanager
from typing import List, Optional

from api_client import (
    ENDPOINT_ADD,
    ENDPOINT_AUTHORIZE,
    ENDPOINT_REQUEST_TOKEN,
    PocketAPIClient,
)
from errors import InvalidStateError, NotAuthorizedError, ProtocolError
from models import (
    AddItemInput,
    AuthorizationResult,
    AuthorizationState,
    Credentials,
    RemoteItem,
)
from storage import SettingsStore

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://getpocket.com/auth/authorize?request_token={}&redirect_uri={}"

CONSUMER_KEY_SETTING = "consumer_key"
ACCESS_TOKEN_SETTING = "access_token"


def authorization_url(request_token: str, redirect_uri: str) -> str:
    """Link the user follows to approve the request token."""
    if not request_token or not redirect_uri:
        raise InvalidStateError("empty params")
    return AUTHORIZE_URL.format(request_token, redirect_uri)


def _mask(token: str) -> str:
    return token[:4] + "..." if len(token) > 4 else "***"


class PocketClient:
    def __init__(self, store: SettingsStore, api: Optional[PocketAPIClient] = None):
        self.store = store
        self.api = api if api is not None else PocketAPIClient()
        self.credentials = Credentials(
            consumer_key=store.get_string(CONSUMER_KEY_SETTING),
            access_token=store.get_string(ACCESS_TOKEN_SETTING),
        )
        self.state = (
            AuthorizationState.AUTHORIZED
            if self.credentials.access_token
            else AuthorizationState.UNAUTHENTICATED
        )
        self._lock = threading.RLock()

    @property
    def consumer_key(self) -> str:
        return self.credentials.consumer_key

    @property
    def request_token(self) -> str:
        return self.credentials.request_token

    @property
    def access_token(self) -> str:
        return self.credentials.access_token

    @contextmanager
    def authorization_attempt(self):
        """Hold the client for a whole request -> authorize sequence."""
        with self._lock:
            yield self

    def obtain_request_token(self, redirect_uri: str) -> str:
        """Obtain the request token used to authorize the user."""
        with self._lock:
            if not self.consumer_key:
                raise InvalidStateError("empty consumer key")

            fields = self.api.call(
                ENDPOINT_REQUEST_TOKEN,
                {"consumer_key": self.consumer_key, "redirect_uri": redirect_uri},
            )

            code = fields.get("code")
            if not code:
                raise ProtocolError("empty request token")

            self.credentials.request_token = str(code)
            self.state = AuthorizationState.REQUEST_TOKEN_OBTAINED
            logger.info(f"Obtained request token {_mask(self.request_token)}")
            return self.request_token

    def build_authorization_url(self, redirect_uri: str) -> str:
        if not self.request_token:
            raise InvalidStateError("empty request token")
        if not redirect_uri:
            raise InvalidStateError("empty redirect uri")
        return authorization_url(self.request_token, redirect_uri)

    def complete_authorization(self) -> AuthorizationResult:
        """
        Exchange the approved request token for an access token.

        The access token is written to the settings store before this
        method returns. The request token is single-use and is dropped
        whether or not the exchange succeeds.
        """
        with self._lock:
            request_token = self.request_token
            if not request_token:
                raise InvalidStateError("empty request token")

            try:
                fields = self.api.call(
                    ENDPOINT_AUTHORIZE,
                    {"consumer_key": self.consumer_key, "code": request_token},
                )
            finally:
                self.credentials.request_token = ""
                if self.state == AuthorizationState.REQUEST_TOKEN_OBTAINED:
                    self.state = (
                        AuthorizationState.AUTHORIZED
                        if self.access_token
                        else AuthorizationState.UNAUTHENTICATED
                    )

            access_token = fields.get("access_token")
            if not access_token:
                raise ProtocolError("empty access token")
            access_token = str(access_token)
            username = fields.get("username") or ""

            self.store.update({ACCESS_TOKEN_SETTING: access_token})

            self.credentials.access_token = access_token
            self.state = AuthorizationState.AUTHORIZED
            logger.info(f"Authorized Pocket user '{username}'")
            return AuthorizationResult(access_token=access_token, username=str(username))

    def add_item(self, item: AddItemInput) -> RemoteItem:
        """
        Create a new item in the Pocket list.

        A 200 response without item.item_id is returned as a RemoteItem
        with an empty item_id instead of raising.
        """
        item.validate()

        fields = self.api.call(ENDPOINT_ADD, item.to_request(self.consumer_key))

        remote = fields.get("item")
        if not isinstance(remote, dict) or not remote.get("item_id"):
            logger.warning(f"Pocket add response for {item.url} has no item id")
            return RemoteItem(
                item_id="", raw=remote if isinstance(remote, dict) else None
            )

        item_id = str(remote["item_id"])
        logger.info(f"Added {item.url} to Pocket as item {item_id}")
        return RemoteItem(item_id=item_id, raw=remote)

    def add(self, url: str, title: str = "", tags: Optional[List[str]] = None) -> RemoteItem:
        """Add url using the access token currently held by the store."""
        # authorization may have completed in another process since __init__
        access_token = self.store.get_string(ACCESS_TOKEN_SETTING)
        if not access_token:
            raise NotAuthorizedError("failed to get access token")

        with self._lock:
            self.credentials.access_token = access_token
            if self.state == AuthorizationState.UNAUTHENTICATED:
                self.state = AuthorizationState.AUTHORIZED

        return self.add_item(
            AddItemInput(
                url=url,
                access_token=access_token,
                title=title,
                tags=list(tags or []),
            )
        )

    def close(self) -> None:
        self.api.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
