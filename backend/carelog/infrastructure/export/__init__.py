from .csv_writer import CsvExportWriter
from .excel_writer import ExcelExportWriter

__all__ = ["CsvExportWriter", "ExcelExportWriter"]
