"""Run the export API with uvicorn: ``python -m resume_export``."""

import uvicorn

from resume_export.config import settings


def main() -> None:
    uvicorn.run(
        "resume_export.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
