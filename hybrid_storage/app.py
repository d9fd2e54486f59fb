"""The entry point of the API server. Fails right away when the object store is not configured."""

from .api.app import create_app
from .settings import settings

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
