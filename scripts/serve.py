"""
Serve the scraper API with uvicorn on $PORT (default 8080).
"""

from __future__ import annotations

import os

import uvicorn


def main() -> int:
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("seller_scraper.main:app", host="0.0.0.0", port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
