"""OAuth 2.0 / OpenID Connect endpoints."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from tollgate.application.usecase.oauth import (
    AuthorizeResponse,
    AuthorizeUseCase,
    GetDiscoveryDocumentUseCase,
    GetKeySetUseCase,
    GetLoginContentUseCase,
    GetSessionUseCase,
    GetUserInfoUseCase,
    SignoutUseCase,
    TokenUseCase,
)
from tollgate.config import Settings
from tollgate.domain.model.context import (
    AuthorizeRequest,
    SessionRequest,
    SignoutRequest,
    TokenRequest,
)
from tollgate.domain.model.response import (
    DiscoveryDocument,
    JsonWebKeySet,
    OAuthError,
    OAuthTokenResponse,
)
from tollgate.domain.value import Headers, OAuthErrorType
from tollgate.interface.api.authentication import RequestAuthenticator, remote_address

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"], route_class=DishkaRoute)

NO_STORE = {"Cache-Control": "no-store", "Pragma": "no-cache"}


async def read_form(request: Request, include_query: bool = False) -> dict[str, str]:
    """Collect form fields, optionally merged over the query string."""
    fields: dict[str, str] = dict(request.query_params) if include_query else {}
    if request.method == "POST":
        form = await request.form()
        fields.update({k: v for k, v in form.items() if isinstance(v, str)})
    return fields


def context_kwargs(request: Request) -> dict:
    kwargs = {"remote_ip": remote_address(request)}
    request_id = request.headers.get(Headers.REQUEST_ID)
    if request_id:
        kwargs["trace_id"] = request_id
    return kwargs


def client_mismatch(
    form_client_id: str | None, basic_client_id: str | None
) -> OAuthError | None:
    """Reject a form client_id naming a different client than the Basic header."""
    if not form_client_id or not basic_client_id:
        return None
    if form_client_id.lower() != basic_client_id.lower():
        logger.info(f"client_id {form_client_id} does not match Basic client {basic_client_id}")
        return OAuthError(
            error=OAuthErrorType.INVALID_CLIENT,
            error_description="client_id does not match the authenticated client",
        )
    return None


def token_json(result: OAuthTokenResponse | OAuthError) -> JSONResponse:
    status_code = (
        status.HTTP_400_BAD_REQUEST if isinstance(result, OAuthError) else status.HTTP_200_OK
    )
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", exclude_none=True),
        headers=NO_STORE,
    )


@router.post("/oauth2_token")
async def token(
    request: Request,
    authenticator: FromDishka[RequestAuthenticator],
    token_use_case: FromDishka[TokenUseCase],
) -> JSONResponse:
    """Token endpoint.

    Accepts form-encoded token requests for every registered grant type.
    Client credentials may be posted or sent with HTTP Basic.

    Example:
        POST /auth/oauth2_token
        grant_type=password&client_id=app&client_secret=s&username=alice&password=p

        Response:
        {
            "access_token": "...",
            "id_token": "eyJ...",
            "token_type": "bearer",
            "expires_in": 3600,
            "refresh_token": "..."
        }
    """
    form = await read_form(request)
    authentication = await authenticator.authenticate(request)

    context = TokenRequest.from_form(
        form,
        authenticated_principal=authentication.principal,
        client_claim_header=request.headers.get(Headers.CLIENT_CLAIM),
        **context_kwargs(request),
    )
    mismatch = client_mismatch(context.client_id, authentication.client_id)
    if mismatch is not None:
        return token_json(mismatch)
    if context.client_id is None:
        context.client_id = authentication.client_id
    if authentication.client_secret:
        context.symmetric_secret = authentication.client_secret

    return token_json(await token_use_case.execute(context))


@router.api_route("/authorize", methods=["GET", "POST"])
async def authorize(
    request: Request,
    authenticator: FromDishka[RequestAuthenticator],
    authorize_use_case: FromDishka[AuthorizeUseCase],
    settings: FromDishka[Settings],
) -> Response:
    """Authorize endpoint.

    Renders the login page, or after a successful login returns the
    authorization code in the requested response mode.
    """
    form = await read_form(request, include_query=True)
    authentication = await authenticator.authenticate(request)

    context = AuthorizeRequest.from_form(
        form,
        authenticated_principal=authentication.principal,
        cookie_value=request.cookies.get(settings.oauth.cookie_name),
        **context_kwargs(request),
    )
    result = await authorize_use_case.execute(context)
    return _render_authorize(result, request, settings)


def _render_authorize(
    result: AuthorizeResponse, request: Request, settings: Settings
) -> Response:
    if result.error is not None:
        return JSONResponse(
            status_code=result.status_code,
            content=result.error.model_dump(mode="json", exclude_none=True),
            headers=NO_STORE,
        )

    if result.location is not None:
        response: Response = RedirectResponse(
            result.location, status_code=result.status_code, headers=result.headers
        )
    else:
        response = Response(
            content=result.content,
            status_code=result.status_code,
            media_type=result.media_type,
            headers=result.headers,
        )

    if result.cookie_value is not None:
        response.set_cookie(
            settings.oauth.cookie_name,
            result.cookie_value,
            expires=result.cookie_expires,
            path=settings.oauth.path_prefix or "/",
            secure=request.url.scheme == "https",
            httponly=True,
            samesite="lax",
        )
    return response


@router.get("/session")
async def session(
    request: Request,
    authenticator: FromDishka[RequestAuthenticator],
    session_use_case: FromDishka[GetSessionUseCase],
) -> JSONResponse:
    """Token response for the session named by the bearer token."""
    authentication = await authenticator.authenticate(request)
    context = SessionRequest(
        authenticated_principal=authentication.principal,
        session=authentication.session,
        **context_kwargs(request),
    )
    return token_json(await session_use_case.execute(context))


@router.get("/userinfo")
async def userinfo(
    request: Request,
    authenticator: FromDishka[RequestAuthenticator],
    userinfo_use_case: FromDishka[GetUserInfoUseCase],
) -> JSONResponse:
    """Claims of the session named by the bearer token."""
    authentication = await authenticator.authenticate(request)
    context = SessionRequest(
        authenticated_principal=authentication.principal,
        session=authentication.session,
        **context_kwargs(request),
    )
    result = await userinfo_use_case.execute(context)
    if isinstance(result, OAuthError):
        return token_json(result)
    return JSONResponse(content=result, headers=NO_STORE)


@router.api_route("/signout", methods=["GET", "POST"])
async def signout(
    request: Request,
    authenticator: FromDishka[RequestAuthenticator],
    signout_use_case: FromDishka[SignoutUseCase],
    settings: FromDishka[Settings],
) -> Response:
    """End session endpoint.

    Terminates the session named by ``id_token_hint``, or every session
    of the users tracked by the SSO cookie.
    """
    form = await read_form(request, include_query=True)
    authentication = await authenticator.authenticate(request)
    context = SignoutRequest.from_form(
        form,
        cookie_value=request.cookies.get(settings.oauth.cookie_name),
        **context_kwargs(request),
    )
    mismatch = client_mismatch(context.client_id, authentication.client_id)
    if mismatch is not None:
        return token_json(mismatch)
    if context.client_id is None:
        context.client_id = authentication.client_id
    context.symmetric_secret = authentication.client_secret

    error = await signout_use_case.execute(context)
    if error is not None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error.model_dump(mode="json", exclude_none=True),
            headers=NO_STORE,
        )

    if context.post_logout_redirect_uri:
        response: Response = RedirectResponse(
            context.post_logout_redirect_uri,
            status_code=status.HTTP_302_FOUND,
            headers=NO_STORE,
        )
    else:
        response = Response(status_code=status.HTTP_204_NO_CONTENT, headers=NO_STORE)

    if form and context.cookie_value and not context.id_token_hint:
        response.delete_cookie(settings.oauth.cookie_name, path=settings.oauth.path_prefix or "/")
    return response


@router.get("/jwks", response_model=JsonWebKeySet)
async def jwks(key_set_use_case: FromDishka[GetKeySetUseCase]) -> JsonWebKeySet:
    """Published token verification keys."""
    return await key_set_use_case.execute()


@router.get("/.well-known/openid-configuration", response_model=DiscoveryDocument)
async def discovery(
    discovery_use_case: FromDishka[GetDiscoveryDocumentUseCase],
) -> DiscoveryDocument:
    """OpenID Connect discovery document."""
    return await discovery_use_case.execute()


@router.get("/content/{path:path}")
async def content(
    path: str, content_use_case: FromDishka[GetLoginContentUseCase]
) -> Response:
    """Static assets of the login page."""
    asset = await content_use_case.execute(path)
    return Response(
        content=asset.content,
        media_type=asset.media_type,
        headers={"X-Frame-Options": "SAMEORIGIN"},
    )


@router.get("/ping", status_code=status.HTTP_204_NO_CONTENT)
async def ping() -> Response:
    """Liveness check."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
