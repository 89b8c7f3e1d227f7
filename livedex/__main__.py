"""Run the Livedex API: python -m livedex"""

import uvicorn

from livedex.config import Config


def main() -> None:
    uvicorn.run(
        "livedex.api.app:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
