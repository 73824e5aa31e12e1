"""Command line entry: serve the LightBnB API."""

import os

import uvicorn


def main() -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run(
        "server.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=False,
    )


if __name__ == "__main__":
    main()
