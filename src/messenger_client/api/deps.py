"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from messenger_client.services.session import MessengerSession
from messenger_client.services.session_host import SessionHost


def get_host(request: Request) -> SessionHost:
    return request.app.state.host


HostDep = Annotated[SessionHost, Depends(get_host)]


def get_current_session(host: HostDep) -> MessengerSession:
    return host.require_session()


CurrentSession = Annotated[MessengerSession, Depends(get_current_session)]
