"""Importers bundled with adminkit."""

from adminkit.importers.lead_importer import LeadImporter

__all__ = ["LeadImporter"]
