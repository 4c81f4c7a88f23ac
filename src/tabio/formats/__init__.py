"""Built-in format handlers."""

from functools import partial

from tabio.formats import clipboard, columnar, csvy, delimited, fwf, markup, spreadsheet, statistical
from tabio.io.extensions import FORMATS
from tabio.io.registry import FormatRegistry


def register_builtin_formats(registry: FormatRegistry) -> FormatRegistry:
    """Register every built-in format on ``registry``."""

    def add(tag, import_fn=None, export_fn=None, **kwargs):
        registry.register(tag, import_fn, export_fn, aliases=FORMATS.get(tag, ()), **kwargs)

    for tag in delimited.DELIMITERS:
        add(
            tag,
            partial(delimited.import_delimited, tag=tag),
            partial(delimited.export_delimited, tag=tag),
            library="pandas",
        )
    add("fwf", fwf.import_fwf, fwf.export_fwf, library="pandas")
    add("csvy", csvy.import_csvy, csvy.export_csvy, library="pandas, pyyaml")

    add("json", markup.import_json, markup.export_json, library="pandas")
    add("jsonl", markup.import_jsonl, markup.export_jsonl, library="pandas")
    add("yaml", markup.import_yaml, markup.export_yaml, library="pyyaml")
    add(
        "html",
        markup.import_html,
        markup.export_html,
        import_all_fn=markup.import_html_all,
        library="lxml",
        multi_table=True,
    )
    add("xml", markup.import_xml, markup.export_xml, library="lxml")

    for tag, writable in (("xlsx", True), ("xls", False), ("ods", True)):
        add(
            tag,
            partial(spreadsheet.import_sheet, tag=tag),
            partial(spreadsheet.export_workbook, tag=tag) if writable else None,
            import_all_fn=partial(spreadsheet.import_workbook, tag=tag),
            library=spreadsheet.ENGINES[tag][0] if tag != "ods" else "odfpy",
            multi_table=writable,
        )

    add("parquet", columnar.import_parquet, columnar.export_parquet, library="pyarrow")
    add("feather", columnar.import_feather, columnar.export_feather, library="pyarrow")
    add("orc", columnar.import_orc, columnar.export_orc, library="pyarrow")
    add("pickle", columnar.import_pickle, columnar.export_pickle, library="pandas")

    add("dta", statistical.import_dta, statistical.export_dta, library="pandas")
    add("sav", statistical.import_sav, statistical.export_sav, library="pyreadstat")
    add("zsav", statistical.import_sav, partial(statistical.export_sav, compress=True), library="pyreadstat")
    add("por", statistical.import_por, library="pyreadstat")
    add("sas7bdat", statistical.import_sas7bdat, library="pandas")
    add("xpt", statistical.import_xpt, statistical.export_xpt, library="pyreadstat")

    add("clipboard", clipboard.import_clipboard, clipboard.export_clipboard, library="pandas")

    return registry


__all__ = ["register_builtin_formats"]
