from storefront.core.app_factory import create_app

app = create_app()


def run() -> None:
    """Serve the API with uvicorn (``storefront-api`` console script)."""
    import os

    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
    )
