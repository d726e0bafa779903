"""Run the API with uvicorn: ``python -m book_catalog``."""

import uvicorn


def main() -> None:
    uvicorn.run("book_catalog.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
