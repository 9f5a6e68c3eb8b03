from .csv import from_dataframe, load_csv_to_graph

__all__ = ["load_csv_to_graph", "from_dataframe"]
