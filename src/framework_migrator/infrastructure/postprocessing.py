"""Post-processing adapter implementation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from framework_migrator.application.options import ConversionOptions
from framework_migrator.postprocess import update_manifest
from framework_migrator.profiles.base import MigrationProfile

logger = logging.getLogger(__name__)


class ManifestPostProcessorImpl:
    """Default ``package.json`` post-processing implementation."""

    def run(
        self,
        manifest_text: str,
        profile: MigrationProfile,
        required_modules: Iterable[str],
        options: ConversionOptions,
    ) -> tuple[str, list[str]]:
        """Apply the profile's dependency table and script mapping.

        Parameters
        ----------
        manifest_text : str
            Original manifest text.
        profile : MigrationProfile
            Profile supplying removed packages, versions and scripts.
        required_modules : Iterable[str]
            Import paths required by rules fired anywhere in the batch.
        options : ConversionOptions
            Conversion options; the manifest is left untouched when
            ``update_dependencies`` is off.

        Returns
        -------
        tuple[str, list[str]]
            Updated manifest text and the change lines.
        """
        if not options.features.update_dependencies:
            return manifest_text, []
        text, changes = update_manifest(
            manifest_text,
            removed=profile.removed_dependencies,
            required_modules=required_modules,
            versions=profile.dependency_versions,
            runtime=profile.runtime_dependencies,
            dev=profile.dev_dependencies,
            scripts=profile.scripts,
        )
        logger.debug("Manifest updated with %d change(s)", len(changes))
        return text, changes
