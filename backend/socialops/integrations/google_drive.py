from socialops.integrations.oauth import OAuthProvider


class GoogleDriveOAuth(OAuthProvider):
    name = "Google Drive"
    authorize_endpoint = "https://accounts.google.com/o/oauth2/v2/auth"
    token_endpoint = "https://oauth2.googleapis.com/token"
    scopes = (
        "https://www.googleapis.com/auth/drive.readonly",
        "https://www.googleapis.com/auth/drive.metadata.readonly",
    )
    # offline + consent so Google hands out a refresh token every time
    extra_auth_params = {"access_type": "offline", "prompt": "consent"}
