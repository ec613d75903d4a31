from .buffer_plotting import plot_indexed_buffers, plot_non_indexed_buffers
