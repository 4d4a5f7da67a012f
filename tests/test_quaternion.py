"""
Tests for quaternion operations.

Quaternions are (w, x, y, z) = w + xi + yj + zk. Decoded rotations only
store (x, y, z); these tests pin down how w is rebuilt and how the result
converts to matrices and angles.
"""

import pytest
import torch
import math

from skelanim.utils.quaternion import (
    normalize_quaternion,
    standardize_quaternion,
    quaternion_from_smallest_three,
    quaternion_to_matrix,
    quaternion_to_axis_angle,
)


# =============================================================================
# Normalization Tests
# =============================================================================

class TestNormalizeQuaternion:
    """Tests for quaternion normalization."""

    def test_unit_quaternion_unchanged(self):
        """Unit quaternion is unchanged by normalization."""
        q = torch.tensor([1.0, 0.0, 0.0, 0.0])
        normalized = normalize_quaternion(q)
        assert torch.allclose(normalized, q)

    def test_batched_normalization(self):
        """Batched normalization works correctly."""
        q = torch.randn(10, 4)
        normalized = normalize_quaternion(q)
        norms = torch.norm(normalized, dim=-1)
        assert torch.allclose(norms, torch.ones(10), atol=1e-6)

    def test_zero_quaternion_stays_finite(self):
        """A zero quaternion does not produce NaNs."""
        normalized = normalize_quaternion(torch.zeros(4))
        assert torch.isfinite(normalized).all()


class TestStandardizeQuaternion:
    """Tests for sign standardization."""

    def test_negative_w_flipped(self):
        """q and -q are the same rotation; w >= 0 is kept."""
        q = torch.tensor([-0.5, 0.5, -0.5, 0.5])
        assert torch.allclose(standardize_quaternion(q), -q)

    def test_positive_w_unchanged(self):
        """Quaternions with w >= 0 pass through."""
        q = torch.tensor([[0.5, -0.5, 0.5, -0.5], [0.0, 1.0, 0.0, 0.0]])
        assert torch.equal(standardize_quaternion(q), q)


# =============================================================================
# Reconstruction from Stored Components
# =============================================================================

class TestQuaternionFromSmallestThree:
    """Tests for rebuilding w from the stored vector part."""

    def test_zero_vector_is_identity(self):
        """(0, 0, 0) is the identity rotation."""
        q = quaternion_from_smallest_three(torch.zeros(3))
        assert torch.allclose(q, torch.tensor([1.0, 0.0, 0.0, 0.0]))

    def test_implied_w(self):
        """w = sqrt(1 - |v|^2)."""
        q = quaternion_from_smallest_three(torch.tensor([0.6, 0.0, 0.0]))
        assert torch.allclose(q, torch.tensor([0.8, 0.6, 0.0, 0.0]), atol=1e-6)

    def test_overlong_vector_renormalized(self):
        """|v| > 1 gives w = 0 and a unit result."""
        q = quaternion_from_smallest_three(torch.tensor([1.0, 1.0, 1.0]))
        s = 1.0 / math.sqrt(3.0)
        assert torch.allclose(q, torch.tensor([0.0, s, s, s]), atol=1e-6)

    def test_batched_unit_norm(self):
        """Any (..., 3) input gives unit quaternions with w >= 0."""
        v = torch.rand(4, 5, 3) * 2 - 1
        q = quaternion_from_smallest_three(v)
        assert q.shape == (4, 5, 4)
        assert torch.allclose(q.norm(dim=-1), torch.ones(4, 5), atol=1e-5)
        assert (q[..., 0] >= 0).all()


# =============================================================================
# Conversions
# =============================================================================

class TestQuaternionToMatrix:
    """Tests for quaternion to rotation matrix conversion."""

    def test_identity_to_identity_matrix(self):
        """Identity quaternion gives identity matrix."""
        q = torch.tensor([1.0, 0.0, 0.0, 0.0])
        R = quaternion_to_matrix(q)
        assert torch.allclose(R, torch.eye(3), atol=1e-6)

    def test_90_deg_rotation_x(self):
        """90 degree rotation around X axis."""
        angle = math.pi / 2
        q = torch.tensor([math.cos(angle/2), math.sin(angle/2), 0.0, 0.0])
        R = quaternion_to_matrix(q)

        # Should rotate Y to Z, Z to -Y
        y = torch.tensor([0.0, 1.0, 0.0])
        z = torch.tensor([0.0, 0.0, 1.0])

        assert torch.allclose(R @ y, z, atol=1e-5)
        assert torch.allclose(R @ z, -y, atol=1e-5)

    def test_matrix_is_orthogonal(self):
        """Resulting matrix is orthogonal (R^T R = I)."""
        q = normalize_quaternion(torch.randn(4))
        R = quaternion_to_matrix(q)
        assert torch.allclose(R.T @ R, torch.eye(3), atol=1e-5)

    def test_matrix_determinant_is_one(self):
        """Rotation matrix has determinant 1."""
        q = normalize_quaternion(torch.randn(4))
        det = torch.det(quaternion_to_matrix(q))
        assert torch.isclose(det, torch.tensor(1.0), atol=1e-5)

    def test_sign_invariant(self):
        """q and -q give the same matrix."""
        q = normalize_quaternion(torch.randn(4))
        assert torch.allclose(quaternion_to_matrix(q), quaternion_to_matrix(-q), atol=1e-6)

    def test_batched_to_matrix(self):
        """Leading dimensions are preserved."""
        q = normalize_quaternion(torch.randn(2, 3, 4))
        assert quaternion_to_matrix(q).shape == (2, 3, 3, 3)


class TestQuaternionToAxisAngle:
    """Tests for quaternion to axis-angle conversion."""

    def test_identity_has_zero_angle(self):
        """Identity rotation has angle 0."""
        _, angle = quaternion_to_axis_angle(torch.tensor([1.0, 0.0, 0.0, 0.0]))
        assert torch.isclose(angle, torch.tensor(0.0), atol=1e-6)

    def test_90_deg_around_z(self):
        """90 degree rotation around Z."""
        half = math.pi / 4
        q = torch.tensor([math.cos(half), 0.0, 0.0, math.sin(half)])
        axis, angle = quaternion_to_axis_angle(q)
        assert torch.allclose(axis, torch.tensor([0.0, 0.0, 1.0]), atol=1e-5)
        assert torch.isclose(angle, torch.tensor(math.pi / 2), atol=1e-5)

    def test_batched_axis_angle(self):
        """Batched conversion returns (...,3) axes and (...) angles."""
        axis, angle = quaternion_to_axis_angle(normalize_quaternion(torch.randn(6, 4)))
        assert axis.shape == (6, 3)
        assert angle.shape == (6,)
        assert ((angle >= 0) & (angle <= 2 * math.pi + 1e-5)).all()
