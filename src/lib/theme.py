"""
Theme loader for orfalius sites.

Each theme is a directory containing:
  - theme.yaml: Configuration (default block titles, code style, asset folders)
  - template.html: Jinja2 page template receiving title, prefix and contents
  - asset folders (css/, js/, fonts/, icons/) copied to the site root
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError, select_autoescape
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from ..config import appsettings


class ThemeError(Exception):
    """Raised when theme loading or validation fails"""
    pass


class Theme:
    """
    Represents an orfalius theme.

    A theme consists of:
      - Configuration from theme.yaml
      - The page template (template.html)
      - Optional asset folders copied verbatim to the site
    """

    def __init__(self, theme_name: Optional[str] = None, themes_dir: Optional[str] = None):
        """
        Load a theme by name.

        Args:
            theme_name: Name of the theme directory (default: settings)
            themes_dir: Path to themes directory (default: packaged themes/)

        Raises:
            ThemeError: If theme directory or required files don't exist
        """
        self.name = theme_name or appsettings.default_theme
        self.themes_dir = Path(themes_dir) if themes_dir else appsettings.themesDir_resolve()
        self.theme_dir = self.themes_dir / self.name

        if not self.theme_dir.is_dir():
            raise ThemeError(
                f"Theme '{self.name}' not found. "
                f"Expected directory: {self.theme_dir}"
            )

        self.config_path = self.theme_dir / "theme.yaml"
        if not self.config_path.exists():
            raise ThemeError(f"Theme '{self.name}' missing theme.yaml")
        self.config = self._config_load()

        self.template_path = self.theme_dir / "template.html"
        if not self.template_path.exists():
            raise ThemeError(f"Theme '{self.name}' missing template.html")
        self.template = self._template_load()

    def _config_load(self) -> Dict[str, Any]:
        """Load and parse theme.yaml"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ThemeError(f"Failed to parse theme.yaml: {e}")
        except OSError as e:
            raise ThemeError(f"Failed to load theme.yaml: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ThemeError("theme.yaml must hold a mapping")
        return config

    def _template_load(self) -> Template:
        """Compile template.html"""
        environment = Environment(
            loader=FileSystemLoader(str(self.theme_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        try:
            return environment.get_template(self.template_path.name)
        except TemplateError as e:
            raise ThemeError(f"Failed to compile template.html: {e}")

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from theme.yaml.

        Supports nested keys with dot notation:
          theme.config_get('code.pygments_style', 'default')
        """
        value: Any = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def labels_get(self) -> Dict[str, str]:
        """Default block titles overridden by this theme"""
        labels = self.config_get('labels', {}) or {}
        return {str(k): str(v) for k, v in labels.items()}

    def pygmentsStyle_get(self) -> str:
        """Pygments style name for server-side highlighting (default: 'default')"""
        return self.config_get('code.pygments_style', 'default')

    def pygmentsCSS_get(self) -> str:
        """CSS rules for class-based Pygments markup in the theme's style"""
        try:
            formatter = HtmlFormatter(style=self.pygmentsStyle_get())
        except ClassNotFound:
            raise ThemeError(f"Unknown Pygments style: {self.pygmentsStyle_get()}")
        return formatter.get_style_defs('code')

    def assetDirs_get(self) -> List[Path]:
        """Existing asset folders of this theme, copied to the site root"""
        names = self.config_get('assets', ['css', 'js', 'fonts', 'icons']) or []
        return [self.theme_dir / name for name in names if (self.theme_dir / name).is_dir()]

    def template_render(self, title: str, prefix: str, contents: str) -> str:
        """
        Render a page.

        Args:
            title: Page title (plain text, escaped by the template)
            prefix: Relative path back to the site root, or '/'
            contents: Compiled document markup (inserted verbatim)

        Returns:
            Complete HTML page
        """
        return self.template.render(title=title, prefix=prefix, contents=contents)

    def __repr__(self) -> str:
        return f"Theme(name='{self.name}', path='{self.theme_dir}')"


def themes_listAvailable(themes_dir: Optional[str] = None) -> list[str]:
    """
    List all available theme names.

    Args:
        themes_dir: Path to themes directory (default: packaged themes/)

    Returns:
        List of theme names (directory names with valid theme.yaml)
    """
    themes_path: Path = Path(themes_dir) if themes_dir else appsettings.themesDir_resolve()

    if not themes_path.exists():
        return []

    themes: list[str] = []
    for item in themes_path.iterdir():
        if item.is_dir() and (item / "theme.yaml").exists():
            themes.append(item.name)

    return sorted(themes)
