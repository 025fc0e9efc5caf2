# main.py

from uvicorn import run

from inkblog.configs import settings


def main() -> None:
    run(
        "inkblog.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        loop="uvloop",
        http="httptools",
    )


if __name__ == "__main__":
    main()
