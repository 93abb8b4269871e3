from ..models import CustomModel


class TokenRefreshRequest(CustomModel):
    refresh_token: str


class AccessToken(CustomModel):
    access_token: str
    token_type: str = "bearer"


class TokenPair(AccessToken):
    refresh_token: str
