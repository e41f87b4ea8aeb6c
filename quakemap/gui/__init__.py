"""Selection logic, panel layout and the PyQt5 map window."""
