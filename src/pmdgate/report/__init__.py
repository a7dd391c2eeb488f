from pmdgate.report.reader import read_cpd_report, read_pmd_report

__all__ = ["read_cpd_report", "read_pmd_report"]
