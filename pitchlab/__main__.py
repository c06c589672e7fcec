from __future__ import annotations

import uvicorn

from pitchlab.config import runtime_config


def main() -> None:
    uvicorn.run(
        "pitchlab.server:create_app",
        factory=True,
        host="0.0.0.0",
        port=runtime_config.get_port(),
    )


if __name__ == "__main__":
    main()
