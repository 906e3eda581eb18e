"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use RODIX_PREVIEW_ prefix (e.g., RODIX_PREVIEW_PORT=4000).

Settings can also be loaded from a .env file in the project root.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use RODIX_PREVIEW_ prefix.

    Examples:
        RODIX_PREVIEW_PROJECT_ROOT=/work/v3
        RODIX_PREVIEW_HTML_FOLDER=/work/v3/plugins/PID_Tuning/htmlStore
        RODIX_PREVIEW_HTML_FILE=PIDTuningWidgetNode.html
        RODIX_PREVIEW_PORT=4000
    """

    model_config = SettingsConfigDict(
        env_prefix="RODIX_PREVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Source locations
    project_root: Path = Field(
        default=Path("."),
        description="Root of the product checkout; other relative paths resolve against it",
    )

    web_svc_dir: Optional[Path] = Field(
        default=None,
        description="Web service source root holding components/ and styles/ (style catalog paths are relative to it)",
    )

    html_folder: Optional[Path] = Field(
        default=None,
        description="Folder holding the RodiX document to preview",
    )

    html_file: str = Field(
        default="index.html",
        description="RodiX document file name inside html_folder",
    )

    plugin_dir: Optional[Path] = Field(
        default=None,
        description="Plugin directory holding the *Contribution.js behavior source",
    )

    style_catalog: Optional[Path] = Field(
        default=None,
        description="Style catalog YAML; the packaged catalog is used when unset",
    )

    # Server configuration
    host: str = Field(
        default="localhost",
        description="Preview server bind host",
    )

    port: int = Field(
        default=3333,
        description="Preview server port",
    )

    poll_interval: float = Field(
        default=1.0,
        description="Seconds between client polls for live-update events",
    )

    # Conversion configuration
    layout_style_id: str = Field(
        default="rodix-layout-styles",
        description="Id of the injected layout <style> element (marks a document as already styled)",
    )

    debug_mode: bool = Field(
        default=False,
        description="Include stack traces in server error pages",
    )

    def webSvcDir_resolve(self) -> Path:
        """
        Resolve the web service source root.

        Returns:
            web_svc_dir if set (relative paths resolved against project_root),
            otherwise the conventional location under project_root.
        """
        if self.web_svc_dir is None:
            return self.project_root / "src" / "rodi" / "code" / "services" / "rodi-web-svc" / "src"
        if self.web_svc_dir.is_absolute():
            return self.web_svc_dir
        return self.project_root / self.web_svc_dir

    def htmlFile_path(self) -> Optional[Path]:
        """Full path of the previewed document, or None if no folder is configured"""
        if self.html_folder is None:
            return None
        return self.html_folder / self.html_file

    def paths_validate(self) -> List[str]:
        """
        Check that the configured locations exist.

        Returns:
            Human-readable problems; empty list when everything is in place
        """
        errors: List[str] = []

        if not self.project_root.exists():
            errors.append(f"Project root not found: {self.project_root}")

        if not self.webSvcDir_resolve().exists():
            errors.append(f"Web service source root not found: {self.webSvcDir_resolve()}")

        html_path = self.htmlFile_path()
        if html_path is None:
            errors.append("No html_folder configured")
        elif not html_path.parent.exists():
            errors.append(f"HTML folder not found: {html_path.parent}")
        elif not html_path.exists():
            errors.append(f"HTML file not found: {html_path}")

        if self.plugin_dir is not None and not self.plugin_dir.is_dir():
            errors.append(f"Plugin directory not found: {self.plugin_dir}")

        return errors


# Singleton instance - import this in your code
appsettings = AppSettings()
