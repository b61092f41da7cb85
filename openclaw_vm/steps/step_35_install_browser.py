from __future__ import annotations

import logging
from urllib.parse import urlparse

from ..lib.manifests import load_packages_manifest
from ..lib.net import download, verify_sha256
from ..lib.pkg import apt_fix_broken, apt_remove, dpkg_install, dpkg_installed, tool_version
from ..pipeline import ProvisionCtx, StepResult

logger = logging.getLogger(__name__)

DOWNLOAD_DIR = "/tmp"


class InstallBrowserStep:
    """Best-effort: fetch the vendor .deb and install it with dpkg.

    Without config.browser_sha256 the download is trusted as served over HTTPS.
    """

    step_id = "35_install_browser"
    title = "Installing Google Chrome (latest version)"

    def run(self, ctx: ProvisionCtx) -> StepResult:
        cfg = ctx.cfg
        dry_run = ctx.dry_run
        browser = load_packages_manifest().get("browser") or {}
        package = str(browser.get("package") or "google-chrome-stable")
        binary = str(browser.get("binary") or package)

        if dpkg_installed(package, dry_run=dry_run):
            logger.info("Removing old %s version...", package)
            apt_remove([package], check=False, dry_run=dry_run)

        filename = urlparse(cfg.browser_url).path.rsplit("/", 1)[-1] or f"{package}.deb"
        deb = ctx.path(DOWNLOAD_DIR) / filename

        # wget -O creates the file before it fails; every exit below removes it.
        try:
            logger.info("Downloading %s...", cfg.browser_url)
            if not download(cfg.browser_url, deb, check=False, dry_run=dry_run):
                ctx.record("browser", {"installed": False, "reason": "download_failed"})
                return StepResult.warn(f"Could not download {cfg.browser_url}")

            if cfg.browser_sha256 and not dry_run:
                if not verify_sha256(deb, cfg.browser_sha256):
                    ctx.record("browser", {"installed": False, "reason": "checksum_mismatch"})
                    return StepResult.warn(f"Checksum mismatch for {filename}; not installing")
            elif not cfg.browser_sha256:
                logger.warning("No browser_sha256 configured; installing %s unverified", filename)

            installed = dpkg_install(str(deb), check=False, dry_run=dry_run) or apt_fix_broken(
                check=False, dry_run=dry_run
            )
        finally:
            if not dry_run:
                deb.unlink(missing_ok=True)

        if not installed:
            ctx.record("browser", {"installed": False, "reason": "install_failed"})
            return StepResult.warn(f"{package} installation had issues but continued")

        version = tool_version([binary, "--version"], dry_run=dry_run) or "unknown"
        ctx.record("browser", {"installed": True, "version": version})
        return StepResult.ok(f"Google Chrome installed: {version}")
