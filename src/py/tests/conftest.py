from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

import pytest
from litestar.serialization import encode_json

WASM_BYTES = b"\x00asm\x01\x00\x00\x00"
INDEX_HTML = "<!DOCTYPE html><html><head><title>Client App</title></head><body><app>Loading...</app></body></html>"
ROBOTS_TXT = "User-agent: *\nDisallow:\n"

# Environment variables that may affect test behavior - clear before each test
_BLAZOR_ENV_VARS = [
    "BLAZOR_DEV_MODE",
    "BLAZOR_APPLICATION_NAME",
]


@pytest.fixture(autouse=True)
def clean_blazor_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear Blazor-related environment variables before each test for isolation."""
    for var in _BLAZOR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@dataclass
class ClientLayout:
    """A built client application on disk.

    ``root/client`` holds the client project, its ``bin/dist`` output and ``wwwroot``;
    ``root/server/Client.dll`` is the copy of the client assembly the host points at.
    """

    root: Path

    index_html: ClassVar[str] = INDEX_HTML
    robots_txt: ClassVar[str] = ROBOTS_TXT
    wasm_bytes: ClassVar[bytes] = WASM_BYTES

    @property
    def project_dir(self) -> Path:
        return self.root / "client"

    @property
    def project_file(self) -> Path:
        return self.project_dir / "Client.csproj"

    @property
    def dist_dir(self) -> Path:
        return self.project_dir / "bin" / "dist"

    @property
    def web_root(self) -> Path:
        return self.project_dir / "wwwroot"

    @property
    def assembly_path(self) -> Path:
        return self.root / "server" / "Client.dll"

    @property
    def descriptor_path(self) -> Path:
        return self.root / "server" / "Client.blazor.config"

    def write_descriptor(self, *flags: str) -> Path:
        lines = [str(self.project_file), "bin/Client.dll", *flags]
        self.descriptor_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return self.descriptor_path

    def write_json_descriptor(self, **fields: Any) -> Path:
        self.descriptor_path.write_bytes(encode_json(fields))
        return self.descriptor_path


def _write(path: Path, content: "str | bytes") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def client_layout(tmp_path: Path) -> ClientLayout:
    """Create a built client application with a line-format build descriptor.

    Returns:
        The layout.
    """
    layout = ClientLayout(root=tmp_path)
    _write(layout.project_file, "<Project />")
    _write(layout.project_dir / "Pages" / "Index.cshtml", "<h1>Hello</h1>")

    _write(layout.dist_dir / "index.html", INDEX_HTML)
    _write(layout.dist_dir / "app.wasm", WASM_BYTES)
    _write(layout.dist_dir / "shared.txt", "from dist")
    _write(layout.dist_dir / "notes.unknownext", "no content type")
    _write(layout.dist_dir / ".secret.txt", "hidden")
    _write(layout.dist_dir / "_framework" / "blazor.js", "window.Blazor = {};")
    _write(layout.dist_dir / "_framework" / "_bin" / "Client.dll", b"MZ-client")
    _write(layout.dist_dir / "_framework" / "_bin" / "Client.pdb", b"pdb-symbols")

    _write(layout.web_root / "robots.txt", ROBOTS_TXT)
    _write(layout.web_root / "shared.txt", "from wwwroot")
    _write(layout.web_root / "css" / "site.css", "body { margin: 0; }")

    _write(layout.root / "outside.txt", "outside the roots")
    _write(layout.assembly_path, b"MZ-client")
    layout.write_descriptor()
    return layout
