# site_analyser/__main__.py
import uvicorn

from site_analyser.core.config import get_settings


def main() -> None:
    uvicorn.run("site_analyser.main:app", host="0.0.0.0", port=get_settings().PORT)


if __name__ == "__main__":
    main()
