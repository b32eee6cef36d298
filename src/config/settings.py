"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use ORFALIUS_ prefix (e.g., ORFALIUS_HIGHLIGHT_CODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use ORFALIUS_ prefix.

    Examples:
        ORFALIUS_IMAGE_DIR=pictures
        ORFALIUS_HIGHLIGHT_CODE=true
        ORFALIUS_THEMES_DIR=/srv/themes
    """

    model_config = SettingsConfigDict(
        env_prefix="ORFALIUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Source tree layout
    image_dir: str = Field(
        default="img",
        description="Folder (next to each document) holding images and animation frame folders",
    )

    video_dir: str = Field(
        default="vid",
        description="Folder (next to each document) holding lecture and inline videos",
    )

    error_dir: str = Field(
        default="error",
        description="Folder name whose documents are served from arbitrary depths (absolute prefix)",
    )

    source_suffix: str = Field(default=".md", description="Suffix of compiled documents")

    snippet_suffix: str = Field(
        default=".mds",
        description="Suffix of include-only snippets (never compiled nor copied)",
    )

    output_suffix: str = Field(default=".html", description="Suffix of compiled pages")

    # Theme configuration
    default_theme: str = Field(default="default", description="Theme used when none is given")

    themes_dir: Optional[str] = Field(
        default=None,
        description="Directory holding theme folders. Defaults to the packaged themes/",
    )

    # Postprocessing configuration
    highlight_code: bool = Field(
        default=False,
        description="Highlight code server-side with Pygments instead of leaving it to the page",
    )

    terminal_class: str = Field(
        default="terminal nohighlight",
        description="Class given to code that carries no language",
    )

    embed_theme: str = Field(default="dark", description="data-theme-id of embedded snippets")

    embed_default_tab: str = Field(
        default="result",
        description="data-default-tab of embedded snippets that do not name one",
    )

    # Presentation runtime configuration
    sync_epsilon: float = Field(
        default=1e-6,
        description="Tolerance when comparing media positions with slide timestamps",
    )

    slide_width: float = Field(default=704, description="Authored slide width in CSS pixels")

    slide_height: float = Field(default=396, description="Authored slide height in CSS pixels")

    export_filename: str = Field(
        default="edit.json",
        description="Download name proposed for exported timing data",
    )

    def themesDir_resolve(self) -> Path:
        """
        Resolve the directory that holds theme folders.

        Returns:
            Configured themes directory, or the themes/ folder shipped with
            the package

        Example:
            >>> settings = AppSettings()
            >>> settings.themesDir_resolve().name
            'themes'
        """
        if self.themes_dir:
            return Path(self.themes_dir)
        return Path(__file__).parent.parent / "themes"


# Singleton instance - import this in your code
appsettings = AppSettings()
