"""
Visualization functions for specindex.

Heatmap of the most specific genes per group and the distribution of
specificity scores.
"""

import numpy as np

from .results import top_genes_per_group


def plot_top_genes_heatmap(obj, n=20, cmap='viridis', main=None,
                           figsize=None, **kwargs):
    """Heatmap of the top ``n`` genes of every group.

    Rows are genes, stacked group by group in group order (a gene appears
    once, under the first group that ranks it); columns are groups.

    Parameters
    ----------
    obj : DataFrame or SpecificityResult
        Specificity results.
    n : int
        Genes per group.
    cmap : str
        Matplotlib colormap.
    main : str, optional
        Title.
    """
    import matplotlib.pyplot as plt

    table = obj['table'] if isinstance(obj, dict) else obj
    top = top_genes_per_group(table, n)

    rows = []
    seen = set()
    for genes in top.values():
        for g in genes:
            if g not in seen:
                rows.append(g)
                seen.add(g)
    mat = table.loc[rows].to_numpy()

    if figsize is None:
        figsize = (1.2 * table.shape[1] + 3, max(4, 0.18 * len(rows) + 1.5))
    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(mat, aspect='auto', cmap=cmap, vmin=0, vmax=1,
                   interpolation='nearest', **kwargs)
    ax.set_xticks(np.arange(table.shape[1]))
    ax.set_xticklabels([str(c) for c in table.columns], rotation=45, ha='right')
    ax.set_yticks(np.arange(len(rows)))
    ax.set_yticklabels(rows, fontsize=6)
    fig.colorbar(im, ax=ax, label='Specificity index')
    if main:
        ax.set_title(main)

    plt.tight_layout()
    return fig, ax


def plot_si_distribution(obj, bins=50, main=None, **kwargs):
    """Histogram of specificity scores, one series per group."""
    import matplotlib.pyplot as plt

    table = obj['table'] if isinstance(obj, dict) else obj
    fig, ax = plt.subplots(figsize=(8, 6))
    edges = np.linspace(0, 1, bins + 1)
    for col in table.columns:
        ax.hist(table[col].to_numpy(), bins=edges, histtype='step',
                label=str(col), **kwargs)
    ax.set_xlabel('Specificity index')
    ax.set_ylabel('Genes')
    ax.set_yscale('log')
    ax.legend()
    if main:
        ax.set_title(main)

    plt.tight_layout()
    return fig, ax
