"""External login router — challenge endpoint that starts a federated login."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse

from dynidp.api.dependencies import get_challenge_orchestrator
from dynidp.auth.challenge import ChallengeOrchestrator
from dynidp.core.errors import HandshakeError, InvalidReturnUrlError, UnknownSchemeError
from dynidp.core.logging import get_logger

router = APIRouter(prefix="/externallogin", tags=["external-login"])
logger = get_logger(__name__)

_FAILURE_PAGE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>Sign-in failed</title></head>
<body>
<h1>Sign-in failed</h1>
<p>We could not sign you in with the selected provider. Please try again or choose another sign-in method.</p>
</body>
</html>
"""


def _failure_page() -> HTMLResponse:
    return HTMLResponse(_FAILURE_PAGE, status_code=status.HTTP_400_BAD_REQUEST)


@router.get("/challenge", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def challenge(
    orchestrator: Annotated[ChallengeOrchestrator, Depends(get_challenge_orchestrator)],
    scheme: Annotated[str, Query(min_length=1)],
    return_url: Annotated[str | None, Query(alias="returnUrl")] = None,
):
    """Redirect the browser to the identity source behind *scheme*."""
    try:
        result = await orchestrator.challenge(scheme, return_url)
    except InvalidReturnUrlError:
        # Already logged as a security event by the orchestrator
        return _failure_page()
    except UnknownSchemeError:
        return _failure_page()
    except HandshakeError as exc:
        logger.error("External challenge failed", scheme=scheme, error=str(exc))
        return _failure_page()
    return RedirectResponse(result.redirect_url, status_code=status.HTTP_302_FOUND)
