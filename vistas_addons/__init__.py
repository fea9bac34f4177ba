# vistas_addons/__init__.py
# Each sub-package with a manifest.json is discovered by vistas.core.loader.AddonLoader.
