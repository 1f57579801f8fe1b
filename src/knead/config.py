"""knead configuration.

KneadConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class KneadConfig:
    """Configuration for a knead site.

    Attributes:
        root: Path to the site root directory (contains templates/, styles/,
              public/ and the site file).  Always resolved to an absolute
              path on construction.
        templates_dir: Directory containing page and layout templates.
        styles_dir: Directory containing style sheets (``.scss``/``.sass``/``.css``).
        public_dir: Directory of static assets copied by default.
        output: Output directory for production builds.
        template_ext: Suffix appended to template ids declared without one.
        minify: Minify HTML and CSS before writing.
        clean: Clear the output directory before writing (default: additive).
        host: Bind address for dev mode.
        port: Bind port for dev mode.  Fixed; no auto-selection.
        base_url: Base URL of the deployed site (``URL`` global, sitemap).
        sitemap: Write ``sitemap.xml`` when ``base_url`` is set.
        dev_warning: Expose the dev-mode console warning script as ``DEV_SCRIPT``.
        workers: Render threads for production builds (1 = serial).

    """

    root: Path = field(default_factory=Path.cwd)
    templates_dir: str = "templates"
    styles_dir: str = "styles"
    public_dir: str = "public"
    output: Path = field(default_factory=lambda: Path("build"))
    template_ext: str = ".html"
    minify: bool = True
    clean: bool = False
    host: str = "127.0.0.1"
    port: int = 8080
    base_url: str = ""
    sitemap: bool = True
    dev_warning: bool = True
    workers: int = 1

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def templates_path(self) -> Path:
        """Absolute path to templates directory."""
        return self.root / self.templates_dir

    @property
    def styles_path(self) -> Path:
        """Absolute path to styles directory."""
        return self.root / self.styles_dir

    @property
    def public_path(self) -> Path:
        """Absolute path to public assets directory."""
        return self.root / self.public_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def dev_url(self) -> str:
        """Base URL of the local dev server."""
        return f"http://{self.host}:{self.port}"
