"""
LinkedIn API constants.

Versions, base URLs and enumerations shared across the client. Endpoint
URLs follow the LinkedIn Marketing API documentation.

Documentation: https://learn.microsoft.com/en-us/linkedin/
"""

from enum import Enum

# Version of the LinkedIn API this library is compatible with
API_VERSION = "202311"

# Version of the REST-li protocol this library is compatible with
RESTLI_PROTOCOL_VERSION = "2.0.0"

BASE_API_URL = "https://api.linkedin.com/v2"
BASE_AUTH_URL = "https://www.linkedin.com/oauth/v2"
ASSET_BASE_URL = "https://api.linkedin.com/rest"

# OAuth Endpoints
LOGIN_URL = f"{BASE_AUTH_URL}/authorization"
ACCESS_TOKEN_URL = f"{BASE_AUTH_URL}/accessToken"

# Resource Endpoints
USER_PROFILE_URL = f"{BASE_API_URL}/me"
SHARE_POST_URL = f"{ASSET_BASE_URL}/posts"
POST_COMMENT_URL = f"{BASE_API_URL}/socialActions/{{post_urn}}/comments"

FEED_UPDATE_URL = "https://www.linkedin.com/feed/update/{post_urn}"


class LinkedinMediaType(str, Enum):
    """Media kinds known to the LinkedIn assets API."""

    IMAGE = "image"
    DOCUMENT = "document"
    ARTICLE = "article"
    VIDEO = "video"


class LinkedinOauthScope(str, Enum):
    """
    Allowed scopes for LinkedIn 3-legged OAuth.

    See: https://learn.microsoft.com/en-us/linkedin/shared/authentication/authentication
    """

    OPENID = "openid"
    PROFILE = "profile"
    LITE_PROFILE = "r_liteprofile"
    BASIC_PROFILE = "r_basicprofile"
    ADS_RW = "rw_ads"
    ADS_REPORTING_READ = "r_ads_reporting"
    ADS_READ = "r_ads"
    EMAIL_ADDRESS = "r_emailaddress"
    EMAIL = "email"
    SHARING = "w_member_social"
    FIRST_DEGREE_CONNECTIONS = "r_1st_connections_size"
    ORGANIZATION_SHARE_READ = "r_organization_social"
    ORGANIZATION_SHARE_WRITE = "w_organization_social"
    ORGANIZATION_ADMIN = "rw_organization_admin"
    ORGANIZATION_ADMIN_READ = "r_organization_admin"


DEFAULT_OAUTH_SCOPES = (
    LinkedinOauthScope.EMAIL_ADDRESS.value,
    LinkedinOauthScope.SHARING.value,
    LinkedinOauthScope.BASIC_PROFILE.value,
    LinkedinOauthScope.ORGANIZATION_SHARE_WRITE.value,
    LinkedinOauthScope.ADS_RW.value,
    LinkedinOauthScope.ORGANIZATION_SHARE_READ.value,
)


def asset_url(media_type: LinkedinMediaType) -> str:
    """Collection URL for an asset kind, e.g. ``.../rest/videos``."""
    return f"{ASSET_BASE_URL}/{LinkedinMediaType(media_type).value}s"


def post_comment_url(post_urn: str) -> str:
    return POST_COMMENT_URL.format(post_urn=post_urn)
