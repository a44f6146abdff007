import base64
import json

import pytest

from src.greenhouse.core.errors import UnauthorizedError
from src.greenhouse.core.services import JwtVerificationService
from src.greenhouse.core.services.jwt.jwt_utils import extract_bearer_token, preview_jwt
from src.greenhouse.runtime.config.config_data import ConfigData, JWTConfig
from src.greenhouse.runtime.context import with_context
from tests.utils import encode_token


def _segment(obj: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


class TestJwtVerificationService:
    async def test_valid_token(self, jwt_verify_service: JwtVerificationService, token_factory):
        token = token_factory(
            "buyer@example.com",
            subject="uid-42",
            extra={"name": "Bea Buyer", "firebase": {"sign_in_provider": "password"}},
        )

        claims = await jwt_verify_service.verify(token)

        assert claims.email == "buyer@example.com"
        assert claims.subject == "uid-42"
        assert claims.name == "Bea Buyer"
        assert claims.email_verified is True
        assert claims.issuer == "https://securetoken.google.com/greenhouse-test"
        assert claims.audience == ["greenhouse-test"]
        assert claims.custom_claims == {"firebase": {"sign_in_provider": "password"}}

    async def test_expired_token(self, jwt_verify_service: JwtVerificationService, token_factory):
        token = token_factory("buyer@example.com", expires_in=-3600)
        with pytest.raises(UnauthorizedError):
            await jwt_verify_service.verify(token)

    async def test_wrong_audience(self, jwt_verify_service: JwtVerificationService, token_factory):
        token = token_factory("buyer@example.com", audience="another-project")
        with pytest.raises(UnauthorizedError):
            await jwt_verify_service.verify(token)

    async def test_wrong_issuer(self, jwt_verify_service: JwtVerificationService, token_factory):
        token = token_factory(
            "buyer@example.com", issuer="https://securetoken.google.com/another-project"
        )
        with pytest.raises(UnauthorizedError, match="Invalid issuer"):
            await jwt_verify_service.verify(token)

    async def test_token_without_email(
        self, jwt_verify_service: JwtVerificationService, token_factory
    ):
        token = token_factory(None)
        with pytest.raises(UnauthorizedError, match="no email"):
            await jwt_verify_service.verify(token)

    async def test_bad_signature(
        self, jwt_verify_service: JwtVerificationService, kid_for_jwt, issuer, project_id
    ):
        token = encode_token(
            b"some-other-key",
            kid_for_jwt,
            issuer=issuer,
            audience=project_id,
            email="buyer@example.com",
        )
        with pytest.raises(UnauthorizedError):
            await jwt_verify_service.verify(token)

    async def test_unknown_kid(
        self, jwt_verify_service: JwtVerificationService, signing_key, issuer, project_id
    ):
        token = encode_token(
            signing_key, "rotated-away", issuer=issuer, audience=project_id, email="a@example.com"
        )
        with pytest.raises(UnauthorizedError, match="No JWK matches"):
            await jwt_verify_service.verify(token)

    async def test_disallowed_algorithm(self, jwt_verify_service: JwtVerificationService, issuer):
        token = ".".join(
            [
                _segment({"alg": "none", "typ": "JWT"}),
                _segment({"iss": issuer, "sub": "x", "email": "a@example.com"}),
                "sig",
            ]
        )
        with pytest.raises(UnauthorizedError, match="Disallowed JWT algorithm"):
            await jwt_verify_service.verify(token)

    async def test_malformed_token(self, jwt_verify_service: JwtVerificationService):
        with pytest.raises(UnauthorizedError):
            await jwt_verify_service.verify("not-a-jwt")

    async def test_unverified_email_rejected_when_required(
        self, jwt_verify_service: JwtVerificationService, token_factory
    ):
        token = token_factory("buyer@example.com", extra={"email_verified": False})
        override = ConfigData(
            jwt=JWTConfig(allowed_algorithms=["HS256"], require_verified_email=True)
        )
        with with_context(override):
            with pytest.raises(UnauthorizedError, match="not verified"):
                await jwt_verify_service.verify(token)


class TestJwtUtils:
    def test_preview_strips_trailing_slash_from_issuer(self):
        token = ".".join(
            [_segment({"alg": "HS256", "kid": "k"}), _segment({"iss": "https://a/"}), "sig"]
        )
        pv = preview_jwt(token)
        assert pv.alg == "HS256"
        assert pv.kid == "k"
        assert pv.iss == "https://a"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer   "])
    def test_extract_bearer_token_rejects(self, header):
        with pytest.raises(UnauthorizedError):
            extract_bearer_token(header)

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
