"""Data models for published keys, validator configuration and authorizer I/O."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BaseConfigModel(BaseModel):
    model_config = ConfigDict(use_attribute_docstrings=True, frozen=True)


class SigningKeyRecord(BaseConfigModel):
    """Single JSON Web Key as published by the identity provider."""

    kid: str
    """
    Key identifier, matched against the "kid" header of incoming tokens
    """

    kty: str
    """
    Key type, only "RSA" keys can be decoded
    """

    n: str = ""
    """
    RSA modulus, URL-safe base64, possibly unpadded
    """

    e: str = ""
    """
    RSA public exponent, URL-safe base64, possibly unpadded
    """

    alg: str | None = None
    """
    Algorithm the provider intends the key for, e.g. "RS256"
    """

    use: str | None = None
    """
    Intended key usage, "sig" for signing keys
    """


class SigningKeySet(BaseConfigModel):
    """JSON Web Key Set document served by the provider key endpoint."""

    keys: list[SigningKeyRecord]

    def find_key(self, kid: str) -> SigningKeyRecord | None:
        """Return the first record with the given key id."""
        for record in self.keys:
            if record.kid == kid:
                return record

        return None


class ValidatorConfig(BaseConfigModel):
    """Immutable settings of one token validator."""

    jwks_url: str
    """
    Provider key endpoint, usually "<issuer>/.well-known/jwks.json"
    """

    expected_issuer: str
    """
    Exact value required in the "iss" claim
    """

    expected_client_id: str
    """
    Value required in the "client_id" claim, when present
    """

    expected_audience: str
    """
    Value required in the "aud" claim, when present
    """

    require_audience: bool = False
    """
    Deny tokens that carry neither a "client_id" nor an "aud" claim
    """

    cache_ttl: float = 3600
    """
    Seconds after which all cached keys are discarded
    """

    fetch_timeout: float = 10
    """
    Seconds to wait for the provider key endpoint
    """


class AuthorizerRequest(BaseConfigModel):
    """API Gateway token authorizer event."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str = "TOKEN"
    authorization_token: str = Field(alias="authorizationToken")
    method_arn: str = Field(alias="methodArn")


class PolicyStatement(BaseModel):
    action: list[str] = Field(
        default_factory=lambda: ["execute-api:Invoke"], serialization_alias="Action"
    )
    effect: Literal["Allow", "Deny"] = Field(serialization_alias="Effect")
    resource: list[str] = Field(serialization_alias="Resource")


class PolicyDocument(BaseModel):
    version: str = Field(default="2012-10-17", serialization_alias="Version")
    statement: list[PolicyStatement] = Field(serialization_alias="Statement")


class AuthorizerResponse(BaseModel):
    """Response returned to API Gateway for an authorized principal."""

    principal_id: str = Field(serialization_alias="principalId")
    policy_document: PolicyDocument = Field(serialization_alias="policyDocument")
    context: dict[str, str] = Field(default_factory=dict)

    def to_dict(self):
        return self.model_dump(by_alias=True)
