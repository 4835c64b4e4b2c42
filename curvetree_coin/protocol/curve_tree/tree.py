"""
⚠️ DRAFT — requires crypto review before production use

Curve tree accumulator.

Leaves are permissible points on the even curve. A node at level k lives
on the even curve when k is even and on the odd curve when k is odd; it is
the permissible vector commitment (zero blinding plus padding) to the
x-coordinates of its ``branching`` children, with missing children
committed as zero. The single node at level ``depth`` is the root.

Membership proof (select-and-rerandomize), walking from the root down:
for the current (rerandomized) node on curve C, the prover on C re-opens
the node as ``commit_vec(children, padding + r_node)``, selects one child
x-coordinate and proves a fresh rerandomization of that child. The
rerandomized children form the public path; the last one is the
rerandomized leaf, and its rerandomization scalar is returned to the
caller, who must still open the leaf itself.

The tree lives in memory only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..curves import Point
from ..exceptions import (
    CryptographicError,
    PreconditionViolation,
    ProtocolInvariantError,
    VerificationError,
)
from ..r1cs import Prover, Verifier
from ..security import RandomnessSource
from .parameters import SelRerandParameters
from .rerandomize import single_level_select_and_rerandomize

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """A permissible node commitment and the padding that made it permissible."""

    point: Point
    padding: int = 0
    children: List[int] = field(default_factory=list)


@dataclass
class SelectAndRerandomizePath:
    """
    Public part of a membership proof.

    ``even_commitments``/``odd_commitments`` hold the rerandomized nodes on
    each curve, top-down; the rerandomized leaf is the last even one.
    """

    even_commitments: List[Point]
    odd_commitments: List[Point]

    def get_rerandomized_leaf(self) -> Point:
        if not self.even_commitments:
            raise PreconditionViolation("Path has no even-curve commitments")
        return self.even_commitments[-1]

    def to_dict(self) -> Dict[str, List[bytes]]:
        return {
            "even": [P.to_bytes() for P in self.even_commitments],
            "odd": [P.to_bytes() for P in self.odd_commitments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, List[bytes]], params: SelRerandParameters) -> SelectAndRerandomizePath:
        try:
            even = params.curve_pair.even
            odd = params.curve_pair.odd
            return cls(
                even_commitments=[Point.from_bytes(even, x) for x in data["even"]],
                odd_commitments=[Point.from_bytes(odd, x) for x in data["odd"]],
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed path: {e}") from e


def expected_path_lengths(depth: int) -> Tuple[int, int]:
    """(even, odd) commitment counts of a path through a tree of ``depth``."""
    return (depth + 1) // 2, depth // 2


class CurveTree:
    """
    In-memory curve tree.

    Args:
        leaves: Permissible even-curve points, in index order
        params: Select-and-rerandomize parameters
        branching: Children per node
        depth: Number of levels above the leaves (root at ``depth``)

    Raises:
        PreconditionViolation: On bad shape or non-permissible leaves
    """

    def __init__(
        self,
        leaves: Sequence[Point],
        params: SelRerandParameters,
        branching: int,
        depth: int,
    ):
        if branching < 1 or depth < 1:
            raise PreconditionViolation("branching and depth must be positive")
        if not leaves:
            raise PreconditionViolation("A curve tree needs at least one leaf")
        if len(leaves) > branching ** depth:
            raise PreconditionViolation(
                f"{len(leaves)} leaves exceed capacity {branching ** depth}"
            )
        even_layer = params.even_parameters
        for leaf in leaves:
            if leaf.curve is not even_layer.curve or not even_layer.is_permissible(leaf):
                raise PreconditionViolation("Leaves must be permissible even-curve points")

        self.params = params
        self.branching = branching
        self.depth = depth
        self.levels: List[List[TreeNode]] = [[TreeNode(point=leaf) for leaf in leaves]]

        for level in range(1, depth + 1):
            children = self.levels[level - 1]
            layer = params.layer_for_level(level)
            nodes = []
            for start in range(0, len(children), branching):
                indices = list(range(start, min(start + branching, len(children))))
                xs = [params.curve_pair.x_as_scalar(children[i].point) for i in indices]
                xs += [0] * (branching - len(xs))
                commitment = layer.commit(xs, 0)
                point, padding = layer.permissible_commitment(commitment)
                nodes.append(TreeNode(point=point, padding=padding, children=indices))
            self.levels.append(nodes)

        if len(self.levels[depth]) != 1:
            raise ProtocolInvariantError("Tree construction did not converge to a single root")
        logger.debug(
            "built curve tree: %d leaves, branching %d, depth %d",
            len(leaves), branching, depth,
        )

    @property
    def root(self) -> Point:
        return self.levels[self.depth][0].point

    @property
    def leaves(self) -> List[Point]:
        return [node.point for node in self.levels[0]]

    def __len__(self) -> int:
        return len(self.levels[0])

    # ========================================================================
    # PROVER
    # ========================================================================

    def select_and_rerandomize_prover_gadget(
        self,
        index: int,
        even_prover: Prover,
        odd_prover: Prover,
        randomness_source: Optional[RandomnessSource] = None,
    ) -> Tuple[SelectAndRerandomizePath, int]:
        """
        Prove membership of leaf ``index`` across both provers.

        Returns:
            (path, rerandomization scalar of the leaf)

        Raises:
            PreconditionViolation: If ``index`` is out of range
        """
        if not 0 <= index < len(self):
            raise PreconditionViolation(f"Leaf index {index} out of range")
        rng = randomness_source or RandomnessSource()
        pair = self.params.curve_pair

        even_commitments: List[Point] = []
        odd_commitments: List[Point] = []

        position = [index // self.branching ** level for level in range(self.depth + 1)]
        node_rerandomization = 0
        rerandomized_node = self.root

        for level in range(self.depth, 0, -1):
            node = self.levels[level][position[level]]
            node_layer = self.params.layer_for_level(level)
            child_layer = self.params.layer_for_level(level - 1)
            prover = even_prover if level % 2 == 0 else odd_prover

            children = [self.levels[level - 1][i].point for i in node.children]
            xs = [pair.x_as_scalar(c) for c in children]
            xs += [0] * (self.branching - len(xs))
            reopened, variables = prover.commit_vec(
                xs, node.padding + node_rerandomization, node_layer.bp_gens
            )
            if reopened != rerandomized_node:
                raise ProtocolInvariantError("Tree node does not re-open to its commitment")

            child = self.levels[level - 1][position[level - 1]].point
            child_rerandomization = rng.get_random_scalar(child_layer.curve.order)
            rerandomized_child = child + child_layer.pc_gens.B_blinding * child_rerandomization

            single_level_select_and_rerandomize(
                prover,
                child_layer,
                rerandomized_child,
                variables,
                child,
                child_rerandomization,
            )

            if (level - 1) % 2 == 0:
                even_commitments.append(rerandomized_child)
            else:
                odd_commitments.append(rerandomized_child)

            rerandomized_node = rerandomized_child
            node_rerandomization = child_rerandomization

        logger.debug("select-and-rerandomize path built for depth %d", self.depth)
        path = SelectAndRerandomizePath(even_commitments, odd_commitments)
        return path, node_rerandomization

    def select_and_rerandomize_verifier_gadget(
        self,
        path: SelectAndRerandomizePath,
        even_verifier: Verifier,
        odd_verifier: Verifier,
    ) -> Point:
        return select_and_rerandomize_verifier_gadget(
            self.root, path, even_verifier, odd_verifier,
            self.params, self.branching, self.depth,
        )


# ============================================================================
# VERIFIER
# ============================================================================


def select_and_rerandomize_verifier_gadget(
    root: Point,
    path: SelectAndRerandomizePath,
    even_verifier: Verifier,
    odd_verifier: Verifier,
    params: SelRerandParameters,
    branching: int,
    depth: int,
) -> Point:
    """
    Mirror of ``CurveTree.select_and_rerandomize_prover_gadget``.

    Only the root and the tree shape are needed, not the tree.

    Returns:
        The rerandomized leaf

    Raises:
        VerificationError: If the path has the wrong shape
    """
    n_even, n_odd = expected_path_lengths(depth)
    if len(path.even_commitments) != n_even or len(path.odd_commitments) != n_odd:
        raise VerificationError()
    if root.curve is not params.layer_for_level(depth).curve:
        raise VerificationError()

    even_iter = iter(path.even_commitments)
    odd_iter = iter(path.odd_commitments)
    rerandomized_node = root

    for level in range(depth, 0, -1):
        child_layer = params.layer_for_level(level - 1)
        verifier = even_verifier if level % 2 == 0 else odd_verifier

        variables = verifier.commit_vec(branching, rerandomized_node)
        rerandomized_child = next(even_iter) if (level - 1) % 2 == 0 else next(odd_iter)
        if rerandomized_child.curve is not child_layer.curve:
            raise VerificationError()

        single_level_select_and_rerandomize(verifier, child_layer, rerandomized_child, variables)
        rerandomized_node = rerandomized_child

    return rerandomized_node
