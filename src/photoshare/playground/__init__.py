"""
PhotoShare Playground - GraphiQL served from a CDN.

Usage:
    from photoshare.playground import mount_playground

    # Mount to FastAPI app
    mount_playground(app, path="/playground")

    # Or get HTML directly
    from photoshare.playground import get_playground_html
    html = get_playground_html(endpoint="/graphql")
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

GRAPHIQL_VERSION = "3.0.10"
REACT_VERSION = "18.2.0"


def get_playground_html(
    *,
    endpoint: str = "/graphql",
    title: str = "PhotoShare Playground",
) -> str:
    """
    Get GraphiQL HTML pointed at the gateway.

    Args:
        endpoint: URL for query/mutation requests
        title: Page title
    """
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{title}</title>
    <link rel="stylesheet" href="https://unpkg.com/graphiql@{GRAPHIQL_VERSION}/graphiql.min.css" />
  </head>
  <body style="margin: 0;">
    <div id="graphiql" style="height: 100vh;"></div>
    <script crossorigin src="https://unpkg.com/react@{REACT_VERSION}/umd/react.production.min.js"></script>
    <script crossorigin src="https://unpkg.com/react-dom@{REACT_VERSION}/umd/react-dom.production.min.js"></script>
    <script crossorigin src="https://unpkg.com/graphiql@{GRAPHIQL_VERSION}/graphiql.min.js"></script>
    <script>
      const fetcher = GraphiQL.createFetcher({{ url: "{endpoint}" }});
      ReactDOM.createRoot(document.getElementById("graphiql")).render(
        React.createElement(GraphiQL, {{ fetcher }})
      );
    </script>
  </body>
</html>
"""


def mount_playground(
    app: FastAPI,
    path: str = "/playground",
    endpoint: str = "/graphql",
) -> None:
    """
    Mount the playground page on a FastAPI application.

    Example:
        app = FastAPI()
        mount_playground(app)
        # Access at http://localhost:4000/playground
    """
    path = path.rstrip("/")

    @app.get(path, response_class=HTMLResponse, include_in_schema=False)
    async def playground_html():
        """PhotoShare Playground."""
        return get_playground_html(endpoint=endpoint)


__all__ = [
    "get_playground_html",
    "mount_playground",
]
