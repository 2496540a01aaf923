# main.py
import os
import time
import logging
import shutil
import tkinter as tk
from tkinter import ttk, messagebox, filedialog
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

from inputs import (PRESETS, HELMHOLTZ_KEYS, SINGLE_COIL_KEYS,
                    parse_helmholtz_form, parse_single_coil_form, get_preset)
from coils import (compute_helmholtz_field, compute_single_coil_field, coil_voltage,
                   helmholtz_field_map, single_coil_field_map, helmholtz_uniformity, CM_TO_M)
from coil_geometry import get_coil_paths, plot_coil_geometry
from report import (format_helmholtz_result, format_single_coil_result,
                    generate_html_report, generate_pdf_report)

logger = logging.getLogger(__name__)

FIELD_INFO = {
    "x_cm": ("x [cm]:", "Axial position of the field point (coil axis is x)."),
    "y_cm": ("y [cm]:", "Transverse position of the field point."),
    "z_cm": ("z [cm]:", "Transverse position of the field point."),
    "R_cm": ("Coil Radius R [cm]:", "Radius of each circular winding."),
    "V": ("Voltage V [V]:", "Voltage applied across each coil."),
    "I": ("Current I [A]:", "Current through the coil."),
    "Omega": ("Resistance [Ohm]:", "Coil resistance."),
    "N": ("Turns N:", "Number of turns per coil (positive integer)."),
}


class FieldHint:
    """Borderless popup with the description of a form field, shown while the pointer is over its label."""

    OFFSET = 16  # px from the pointer

    def __init__(self, label, text):
        self.label = label
        self.text = text
        self.popup = None
        label.bind("<Enter>", self.show)
        label.bind("<Leave>", self.hide)

    def show(self, event):
        self.hide()
        self.popup = tk.Toplevel(self.label)
        self.popup.wm_overrideredirect(True)
        self.popup.wm_geometry(f"+{event.x_root + self.OFFSET}+{event.y_root + self.OFFSET}")
        tk.Label(self.popup, text=self.text, background="#ffffe0", relief='solid', borderwidth=1,
                 wraplength=220, justify='left', padx=3).pack()

    def hide(self, event=None):
        if self.popup is not None:
            self.popup.destroy()
            self.popup = None


class CalculatorTab:
    """Form, preset selector, output and error labels for one coil calculator."""

    def __init__(self, app, parent, calculator, keys, title, run_command):
        self.app = app
        self.calculator = calculator
        self.keys = keys
        self.entries = {}
        self.last_params = None
        self.last_results = None

        frame = ttk.Frame(parent, padding="10")
        frame.pack(fill=tk.BOTH, expand=True)

        top_frame = ttk.Frame(frame)
        top_frame.pack(fill=tk.X, pady=(0, 10))
        ttk.Label(top_frame, text="Load Preset:").pack(side=tk.LEFT, padx=(0, 5))
        preset_names = list(PRESETS[calculator].keys())
        self.preset_var = tk.StringVar(value=preset_names[1] if len(preset_names) > 1 else "Custom")
        preset_menu = ttk.Combobox(top_frame, textvariable=self.preset_var,
                                   values=preset_names, state="readonly")
        preset_menu.pack(side=tk.LEFT, fill=tk.X, expand=True)
        preset_menu.bind("<<ComboboxSelected>>", self.load_preset)

        input_frame = ttk.LabelFrame(frame, text=title, padding=10)
        input_frame.pack(fill=tk.X)
        for i, key in enumerate(keys):
            label_text, hint_text = FIELD_INFO[key]
            label = ttk.Label(input_frame, text=label_text)
            label.grid(row=i, column=0, sticky=tk.W, pady=2)
            FieldHint(label, hint_text)
            var = tk.StringVar()
            ttk.Entry(input_frame, width=20, textvariable=var).grid(row=i, column=1, sticky=tk.EW, pady=2)
            self.entries[key] = var
        input_frame.columnconfigure(1, weight=1)

        button_frame = ttk.Frame(frame)
        button_frame.pack(fill=tk.X, pady=10)
        ttk.Button(button_frame, text="▶ Calculate Field", command=run_command,
                   style="Accent.TButton").pack(side=tk.LEFT, expand=True, fill=tk.X)
        self.export_button = ttk.Menubutton(button_frame, text="Export Report", state=tk.DISABLED)
        self.export_button.pack(side=tk.LEFT, padx=(5, 0))
        export_menu = tk.Menu(self.export_button, tearoff=0)
        export_menu.add_command(label="Export as PDF", command=lambda: self.app.export_report(self, 'pdf'))
        export_menu.add_command(label="Export as HTML", command=lambda: self.app.export_report(self, 'html'))
        self.export_button["menu"] = export_menu

        self.error_label = ttk.Label(frame, text="", foreground="#D32F2F")
        self.error_label.pack(fill=tk.X)

        output_frame = ttk.LabelFrame(frame, text="Result", padding=10)
        output_frame.pack(fill=tk.BOTH, expand=True, pady=5)
        self.output_label = ttk.Label(output_frame, text="N/A", font=("Courier", 10, "bold"), justify='left')
        self.output_label.pack(anchor='nw')

        self.load_preset()

    def load_preset(self, event=None):
        preset = get_preset(self.calculator, self.preset_var.get())
        for key, value in preset.items():
            if key in self.entries:
                self.entries[key].set(str(value))

    def form_values(self):
        return {key: var.get() for key, var in self.entries.items()}

    def show_error(self, msg=""):
        self.error_label.config(text=msg)


class CoilFieldApp:
    def __init__(self, root_window):
        self.root = root_window
        self.root.title("Coil Field Suite - Helmholtz & Single Coil Calculator")
        self.root.geometry("1100x800")

        self.output_dir = "field_output_" + time.strftime("%Y%m%d_%H%M%S")
        os.makedirs(self.output_dir, exist_ok=True)

        self.notebook = ttk.Notebook(root_window)
        self.notebook.pack(pady=10, padx=10, fill="both", expand=True)

        self.tab_helmholtz = ttk.Frame(self.notebook)
        self.tab_single = ttk.Frame(self.notebook)
        self.tab_map = ttk.Frame(self.notebook)

        self.notebook.add(self.tab_helmholtz, text='Helmholtz Pair')
        self.notebook.add(self.tab_single, text='Single Coil')
        self.notebook.add(self.tab_map, text='Field Map')

        self.helmholtz = CalculatorTab(self, self.tab_helmholtz, "helmholtz", HELMHOLTZ_KEYS,
                                       "Helmholtz Pair Parameters", self.run_helmholtz)
        self.single = CalculatorTab(self, self.tab_single, "single_coil", SINGLE_COIL_KEYS,
                                    "Single Coil Parameters", self.run_single_coil)
        self.create_map_tab()

        self.root.protocol("WM_DELETE_WINDOW", self.on_closing)

    def on_closing(self):
        if messagebox.askokcancel("Quit", "Do you want to quit?"):
            plt.close('all')
            self.root.destroy()

    def run_helmholtz(self):
        tab = self.helmholtz
        tab.show_error("")
        try:
            params = parse_helmholtz_form(tab.form_values())
            B = compute_helmholtz_field(**params)
            ripple = helmholtz_uniformity(params["R_cm"], params["V"], params["Omega"], params["N"])
        except ValueError as e:
            logger.info("Helmholtz calculation rejected: %s", e)
            tab.show_error(str(e))
            return

        tab.output_label.config(text=format_helmholtz_result(B) + f"\nCentral ripple (+-0.1 R) = {ripple:.3e} %")
        tab.last_params = dict(params, configuration="helmholtz")
        tab.last_results = {"B": B, "B_mag": float(np.linalg.norm(B)), "central_ripple_percent": ripple}
        tab.export_button.config(state=tk.NORMAL)

    def run_single_coil(self):
        tab = self.single
        tab.show_error("")
        try:
            params = parse_single_coil_form(tab.form_values())
            result = compute_single_coil_field(params["x_cm"], params["y_cm"], params["z_cm"],
                                               params["R_cm"], params["I"], params["N"])
        except ValueError as e:
            logger.info("Single coil calculation rejected: %s", e)
            tab.show_error(str(e))
            return

        voltage = coil_voltage(params["I"], params["Omega"])
        tab.output_label.config(text=format_single_coil_result(result, voltage))
        tab.last_params = dict(params, configuration="single")
        tab.last_results = dict(result, coil_voltage_V=voltage)
        tab.export_button.config(state=tk.NORMAL)

    def create_map_tab(self):
        frame = ttk.Frame(self.tab_map, padding="10")
        frame.pack(fill=tk.BOTH, expand=True)

        control_frame = ttk.Frame(frame)
        control_frame.pack(fill=tk.X)
        ttk.Label(control_frame, text="Configuration:").pack(side=tk.LEFT, padx=(0, 5))
        self.map_config_var = tk.StringVar(value="Helmholtz Pair")
        ttk.Combobox(control_frame, textvariable=self.map_config_var,
                     values=["Helmholtz Pair", "Single Coil"], state="readonly").pack(side=tk.LEFT)
        ttk.Button(control_frame, text="Calculate B-Field Map", command=self.run_field_map,
                   style="Accent.TButton").pack(side=tk.LEFT, fill=tk.X, expand=True, padx=(10, 0))

        self.map_status = ttk.Label(frame, text="Uses the parameters entered in the calculator tabs.")
        self.map_status.pack(pady=5)

        plot_frame = ttk.LabelFrame(frame, text="Magnetic Field in the (x, rho) Plane", padding="10")
        plot_frame.pack(fill=tk.BOTH, expand=True, pady=5)
        self.map_fig, self.map_ax = plt.subplots(figsize=(7, 6))
        self.map_canvas = FigureCanvasTkAgg(self.map_fig, master=plot_frame)
        self.map_canvas.get_tk_widget().pack(fill=tk.BOTH, expand=True)
        self.map_fig.tight_layout()

    def run_field_map(self):
        is_helmholtz = self.map_config_var.get() == "Helmholtz Pair"
        self.map_status.config(text="Calculating B-field map... this may take a moment.")
        self.root.update_idletasks()

        try:
            if is_helmholtz:
                params = parse_helmholtz_form(self.helmholtz.form_values())
                field_map = helmholtz_field_map(params["R_cm"], params["V"], params["Omega"], params["N"])
            else:
                params = parse_single_coil_form(self.single.form_values())
                field_map = single_coil_field_map(params["R_cm"], params["I"], params["N"])
        except ValueError as e:
            messagebox.showerror("Input Error", f"Invalid coil parameters: {e}")
            self.map_status.config(text="Error during B-field calculation.")
            return

        x_grid, rho_grid = field_map["x_grid"], field_map["rho_grid"]
        B_mag = field_map["B_mag"]
        R = params["R_cm"] * CM_TO_M

        self.map_ax.clear()
        contour = self.map_ax.contourf(x_grid, rho_grid, B_mag.T, levels=30, cmap='plasma')
        if hasattr(self, 'map_cbar') and self.map_cbar:
            self.map_cbar.remove()
        self.map_cbar = self.map_fig.colorbar(contour, ax=self.map_ax, label='Magnetic Field Strength |B| (T)')

        skip_val = max(1, len(x_grid) // 20)
        finite_max = np.nanmax(B_mag) if np.any(np.isfinite(B_mag)) else 0
        scale_val = finite_max * 30 if finite_max > 0 else 1
        X, P = np.meshgrid(x_grid[::skip_val], rho_grid[::skip_val], indexing='ij')
        self.map_ax.quiver(X, P,
                           field_map["B_axial"][::skip_val, ::skip_val],
                           field_map["B_radial"][::skip_val, ::skip_val],
                           color='white', scale=scale_val, width=0.003)

        configuration = "helmholtz" if is_helmholtz else "single"
        for path in get_coil_paths({"configuration": configuration, "loop_radius": R}):
            self.map_ax.plot(path[0, 0], R, 'ko', markersize=6)

        self.map_ax.set_xlabel("Axial position x (m)"); self.map_ax.set_ylabel("Radius rho (m)")
        self.map_ax.set_title(f"Field Map ({self.map_config_var.get()})")
        self.map_ax.set_aspect('equal', adjustable='box')
        self.map_canvas.draw()
        self.map_status.config(text="B-field calculation complete.")

    def save_geometry_image(self, params):
        R = params["R_cm"] * CM_TO_M
        paths = get_coil_paths({"configuration": params["configuration"], "loop_radius": R})
        fig = plt.figure(figsize=(6, 6))
        ax = fig.add_subplot(111, projection='3d')
        title = "Helmholtz Pair" if params["configuration"] == "helmholtz" else "Single Coil"
        plot_coil_geometry(paths, R, ax=ax, title=title)
        image_path = os.path.join(self.output_dir, f"coil_geometry_{params['configuration']}.png")
        fig.savefig(image_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return image_path

    def export_report(self, tab, format_type):
        if not tab.last_results:
            messagebox.showwarning("Export Warning", "No field results to report. Please run a calculation first.")
            return

        filename = filedialog.asksaveasfilename(
            initialdir=self.output_dir, title=f"Save {format_type.upper()} Report",
            defaultextension=f".{format_type}",
            filetypes=((f"{format_type.upper()} files", f"*.{format_type}"), ("All files", "*.*"))
        )
        if not filename: return

        try:
            image_path = self.save_geometry_image(tab.last_params)
            if format_type == 'pdf':
                generate_pdf_report(filename, tab.last_params, tab.last_results, image_path=image_path)
            else:  # html
                report_dir = os.path.dirname(filename)
                base_image_name = os.path.basename(image_path)
                destination_image_path = os.path.join(report_dir, base_image_name)
                if not os.path.exists(destination_image_path) or not os.path.samefile(image_path, destination_image_path):
                    shutil.copy(image_path, destination_image_path)
                generate_html_report(filename, tab.last_params, tab.last_results, image_path=base_image_name)

            messagebox.showinfo("Export Successful", f"Report saved to:\n{filename}")
        except (OSError, RuntimeError, ValueError) as e:
            logger.error("Report export failed: %s: %s", type(e).__name__, e)
            messagebox.showerror("Export Failed", f"An error occurred during report generation: {e}")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    root = tk.Tk()
    style = ttk.Style(root)
    available_themes = style.theme_names()
    if 'clam' in available_themes:
        style.theme_use("clam")
    elif 'vista' in available_themes:
        style.theme_use("vista")
    elif 'aqua' in available_themes:
        style.theme_use("aqua")

    style.configure("Accent.TButton", foreground="white", background="#0078D4", font=('Helvetica', 10, 'bold'))
    style.configure("TButton", font=('Helvetica', 10))
    style.configure("TLabel", font=('Helvetica', 10))
    style.configure("TEntry", font=('Helvetica', 10))
    style.configure("TCombobox", font=('Helvetica', 10))
    style.configure("TMenubutton", font=('Helvetica', 10))
    style.configure("TLabelframe", font=('Helvetica', 10))
    style.configure("TNotebook.Tab", font=('Helvetica', 10, 'bold'))
    style.configure("TLabelframe.Label", font=('Helvetica', 10, 'bold'))

    app = CoilFieldApp(root)
    root.mainloop()
