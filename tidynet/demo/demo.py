from functools import partial

import polars as pl

import tidynet as tn


def main():
    print("🏗️ Building a small collaboration network...")

    nodes = pl.DataFrame({
        "node_key": ["A", "B", "C", "D", "E", "F"],
        "labels": ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank"],
    })
    edges = pl.DataFrame({
        "from": ["A", "A", "B", "C", "D", "D", "E"],
        "to": ["B", "C", "C", "D", "E", "F", "F"],
        "weight": [1.0, 2.0, 1.0, 3.0, 1.0, 2.0, 1.0],
    })
    g = tn.construct(nodes, edges)

    print("🧩 Initial Graph:")
    print(g)

    # --- Metrics attach as columns ---
    g = (
        g.activate("nodes")
        .mutate("degree", tn.centrality_degree)
        .activate("nodes")
        .mutate("strength", partial(tn.centrality_strength, weights="weight"))
        .activate("nodes")
        .mutate("betweenness", tn.centrality_betweenness)
        .activate("nodes")
        .mutate("group", partial(tn.group_louvain, seed=42))
    )
    print("\n📈 Node table with metrics:")
    print(g.nodes)
    print(f"\n🧭 Modularity of the Louvain partition: {tn.modularity(g, 'group'):.3f}")

    # --- Filtering nodes cascades to their edges ---
    print("\n✂️ Dropping Dave (edges touching him go too)...")
    small = g.activate("nodes").filter(lambda row: row.node_key != "D")
    print(small)

    # --- Lazy backend proxy: first access converts, later calls reuse it ---
    print("\n📌 PageRank through the networkx proxy:")
    for node, score in g.nx.pagerank(weight="weight").items():
        print(f"  {node}: {score:.4f}")

    print("\n🕓 History:")
    print(g.history(as_df=True).select("version", "op", "column"))

    # Plot the graph
    dot = g.plot(layout="kk", node_aes={"size": "strength", "color": "group", "label": "labels"},
                 edge_aes={"width": "weight"}, seed=42)
    print("\n🖼️ DOT source:")
    print(dot.source)


if __name__ == "__main__":
    main()
