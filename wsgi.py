import os

# Force production env if the deployment does not say otherwise
os.environ.setdefault("APP_ENV", "production")

from community_portal import create_app  # noqa: E402

app = create_app()
