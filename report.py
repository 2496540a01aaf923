# report.py
import logging
import os
from datetime import datetime

import numpy as np
from fpdf import FPDF
from fpdf.enums import XPos, YPos

logger = logging.getLogger(__name__)

PARAM_LABELS = {
    "configuration": "Configuration",
    "x_cm": "x [cm]", "y_cm": "y [cm]", "z_cm": "z [cm]",
    "R_cm": "Coil Radius R [cm]",
    "V": "Voltage V [V]", "I": "Current I [A]",
    "Omega": "Resistance [Ohm]", "N": "Turns N",
}


def to_sci(num):
    """Six-digit scientific notation; non-finite values print as NaN."""
    if not np.isfinite(num):
        return "NaN"
    return f"{num:.6e}"


def format_vector(vec):
    return "[" + ", ".join(to_sci(v) for v in vec) + "]"


def format_key_for_display(key):
    return PARAM_LABELS.get(key, key.replace('_', ' ').title())


def format_value(value):
    if isinstance(value, (np.ndarray, list, tuple)):
        return format_vector(value)
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, (float, np.floating)):
        return to_sci(value)
    return str(value)


def format_helmholtz_result(B):
    bmag = float(np.linalg.norm(B))
    return f"B = {format_vector(B)} T\n|B| = {to_sci(bmag)} T"


def format_single_coil_result(result, voltage=None):
    lines = [
        f"B = {format_vector(result['B'])} T",
        f"|B| = {to_sci(result['B_mag'])} T",
        f"grad|B| = {format_vector(result['grad'])} T/m",
    ]
    if voltage is not None:
        lines.append(f"Coil voltage (I*R) = {to_sci(voltage)} V")
    return "\n".join(lines)


def results_table(results):
    """Flattens a result dict into display rows, splitting vectors into components."""
    rows = {}
    for key, value in results.items():
        if key in ("B", "grad") and np.ndim(value) == 1 and len(value) == 3:
            unit = "T/m" if key == "grad" else "T"
            prefix = "grad|B|" if key == "grad" else "B"
            for axis, component in zip("xyz", value):
                rows[f"{prefix}_{axis} [{unit}]"] = to_sci(component)
        elif key == "B_mag":
            rows["|B| [T]"] = to_sci(value)
        else:
            rows[format_key_for_display(key)] = format_value(value)
    return rows


class PDF(FPDF):
    def header(self):
        self.set_font("Helvetica", 'B', 16)
        self.cell(0, 10, "Coil Magnetic Field Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
        self.set_font("Helvetica", '', 10)
        self.cell(0, 8, f"Report Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
                  new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
        self.ln(10)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 10, f'Page {self.page_no()}', align='C')

    def section_title(self, title):
        if self.get_y() > 240:
            self.add_page()
        self.set_font("Helvetica", 'B', 12)
        self.cell(0, 10, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(2)

    def key_value_table(self, data):
        self.set_font("Helvetica", '', 10)
        col_width_key = 80
        col_width_val = self.w - self.l_margin - self.r_margin - col_width_key

        for key, value in data.items():
            self.cell(col_width_key, 8, f"{key}:", border=1)
            self.multi_cell(col_width_val, 8, str(value), border=1,
                            new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            if self.get_y() > 260:
                self.add_page()
        self.ln(5)


def _split_params(params):
    return {format_key_for_display(k): format_value(v) for k, v in params.items()}


def generate_pdf_report(filename, params, results, image_path=None):
    pdf = PDF()
    pdf.add_page()

    pdf.section_title("Input Parameters")
    pdf.key_value_table(_split_params(params))

    if image_path and os.path.exists(image_path):
        if pdf.get_y() > 150:
            pdf.add_page()
        pdf.section_title("Coil Geometry")
        page_width = pdf.w - 2 * pdf.l_margin
        pdf.image(image_path, x=pdf.l_margin + (page_width - page_width * 0.7) / 2, w=page_width * 0.7)
        pdf.ln(5)
    elif image_path:
        logger.warning("Coil geometry image not found at %s, omitting it from the PDF", image_path)

    pdf.section_title("Field Results")
    pdf.key_value_table(results_table(results))

    pdf.output(filename)
    logger.info("PDF report written to %s", filename)


def generate_html_report(filename, params, results, image_path=None):
    html = f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Coil Magnetic Field Report</title>
        <style>
            body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif; line-height: 1.6; margin: 20px; }}
            h1, h2 {{ color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; }}
            table {{ border-collapse: collapse; width: 80%; margin: 20px auto; box-shadow: 0 0 10px rgba(0,0,0,0.1); }}
            th, td {{ border: 1px solid #ddd; padding: 12px; text-align: left; }}
            th {{ background-color: #f2f2f2; font-weight: bold; }}
            td.num {{ font-family: "Courier New", monospace; }}
            .container {{ max-width: 1000px; margin: auto; }}
            .report-header {{ text-align: center; margin-bottom: 40px; }}
            .report-header p {{ color: #7f8c8d; font-size: 0.9em; }}
            img {{ max-width: 100%; height: auto; display: block; margin: 20px auto; border: 1px solid #ddd; padding: 5px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="report-header">
                <h1>Coil Magnetic Field Report</h1>
                <p>Report Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</p>
            </div>

            <h2>Input Parameters</h2>
            <table>
                <tr><th>Parameter</th><th>Value</th></tr>
    """
    for key, value in _split_params(params).items():
        html += f"<tr><td>{key}</td><td class=\"num\">{value}</td></tr>"
    html += "</table>"

    if image_path:
        html += f"""
            <h2>Coil Geometry</h2>
            <img src="{image_path}" alt="Coil Geometry">
        """

    html += "<h2>Field Results</h2><table><tr><th>Quantity</th><th>Value</th></tr>"
    for key, value in results_table(results).items():
        html += f"<tr><td>{key}</td><td class=\"num\">{value}</td></tr>"
    html += "</table>"

    html += """
        </div>
    </body>
    </html>
    """
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(html)
    logger.info("HTML report written to %s", filename)
