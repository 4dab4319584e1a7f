"""LeadScan: sitemap-driven accessibility audits graded for outreach."""

__version__ = "0.1.0"
