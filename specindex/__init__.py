"""
specindex: cell-type specificity of gene expression.

Specificity index scoring of genes across sample groups, with bootstrap
resampling, permutation p-values and top-gene ranking.
"""

__version__ = "0.1.0"

# --- Errors ---
from .errors import InvalidGroupingError, InvalidParameterError, DegenerateGroupWarning

# --- Classes ---
from .classes import ExpressionSet, SpecificityResult
from .grouping import SampleGrouping, make_grouping, align_grouping, split_into_groups

# --- ExpressionSet construction ---
from .exprset import make_exprset, as_expression

# --- Expression ---
from .expression import cpm, rpkm, tpm, compute_group_means

# --- Filtering ---
from .filtering import filter_by_expression

# --- Specificity index ---
from .specificity import (
    specificity,
    specificity_index,
    specificity_index_resampled,
    DEFAULT_ITERATIONS,
)

# --- Resampling ---
from .resampling import spawn_generators, resample_columns, permute_columns

# --- Permutation testing ---
from .permutation import permutation_test, adjust_pvalues, DEFAULT_PERMUTATIONS

# --- Results ---
from .results import top_genes_per_group, top_table

# --- I/O ---
from .io import (
    read_expression,
    read_sample_sheet,
    read_exprset,
    write_specificity_table,
    read_specificity_table,
)

# --- Visualization ---
from .visualization import plot_top_genes_heatmap, plot_si_distribution
