import matplotlib

# Plot tests run headless
matplotlib.use("Agg")
