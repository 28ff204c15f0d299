# ===================================== IMPORTS ====================================== #

# Standard Library Imports
import logging
from pathlib import Path
from typing import Iterable, Set, Tuple, Union

# Third-Party Imports
from skbio import TreeNode

# Local Imports
from workflow_mags.utils.data import check_path

# ========================== INITIALIZATION & CONFIGURATION ========================== #

logger = logging.getLogger('workflow_mags')

# ==================================== FUNCTIONS ===================================== #

def import_tree(tree_path: Union[str, Path]) -> TreeNode:
    """Load a Newick phylogenetic tree (e.g. the GTDB-Tk bacterial tree)."""
    tree_path = check_path(tree_path, "Phylogenetic tree")
    tree = TreeNode.read(
        str(tree_path), format='newick', convert_underscores=False
    )
    logger.info(f"Loaded tree with {tree.count(tips=True)} tips")
    return tree


def tip_names(tree: TreeNode) -> Set[str]:
    return {tip.name for tip in tree.tips() if tip.name is not None}


def compare_tips(
    tree: TreeNode,
    feature_ids: Iterable[str]
) -> Tuple[Set[str], Set[str]]:
    """Return (features missing from the tree, tree tips that are not features)."""
    tips = tip_names(tree)
    features = set(feature_ids)
    return features - tips, tips - features
