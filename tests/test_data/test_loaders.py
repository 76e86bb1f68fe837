"""Test connectivity matrix loading from files."""

import tempfile
import unittest
from pathlib import Path

import jax
import numpy as np

jax.config.update("jax_enable_x64", True)

from bdmodels import HopfieldNet, load_matrix


class TestLoadMatrix(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.matrix = np.array([[0.0, 0.25, 0.5], [0.25, 0.0, 1.0], [0.5, 1.0, 0.0]])

    def tearDown(self):
        self._tmp.cleanup()

    def test_cancelled_selection(self):
        self.assertIsNone(load_matrix(None))
        self.assertIsNone(load_matrix(""))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_matrix(self.tmp / "missing.npy")

    def test_npy(self):
        path = self.tmp / "weights.npy"
        np.save(path, self.matrix)
        np.testing.assert_array_equal(load_matrix(path), self.matrix)

    def test_npz_prefers_named_matrix(self):
        path = self.tmp / "weights.npz"
        np.savez(path, lengths=np.ones((3, 3)), Wij=self.matrix)
        np.testing.assert_array_equal(load_matrix(path), self.matrix)

    def test_npz_falls_back_to_first_array(self):
        path = self.tmp / "other.npz"
        np.savez(path, connectivity=self.matrix)
        np.testing.assert_array_equal(load_matrix(str(path)), self.matrix)

    def test_whitespace_text(self):
        path = self.tmp / "weights.txt"
        np.savetxt(path, self.matrix)
        np.testing.assert_allclose(load_matrix(path), self.matrix)

    def test_csv(self):
        path = self.tmp / "weights.csv"
        np.savetxt(path, self.matrix, delimiter=",")
        np.testing.assert_allclose(load_matrix(path), self.matrix)

    def test_comment_lines_do_not_pick_delimiter(self):
        path = self.tmp / "commented.txt"
        np.savetxt(path, self.matrix, header="weights, symmetric")
        np.testing.assert_allclose(load_matrix(path), self.matrix)

        path = self.tmp / "commented.csv"
        path.write_text("# weights, symmetric\n0,1\n1,0\n")
        np.testing.assert_array_equal(load_matrix(path), np.array([[0.0, 1.0], [1.0, 0.0]]))

        path = self.tmp / "only_comments.txt"
        path.write_text("# weights, symmetric\n")
        self.assertIsNone(load_matrix(path))

    def test_single_value_is_a_matrix(self):
        path = self.tmp / "one.txt"
        path.write_text("2.5\n")
        Wij = load_matrix(path)
        self.assertEqual(Wij.shape, (1, 1))
        self.assertEqual(float(Wij[0, 0]), 2.5)

    def test_empty_matrix_is_cancel(self):
        path = self.tmp / "empty.txt"
        path.write_text("\n")
        self.assertIsNone(load_matrix(path))

        path = self.tmp / "empty.npy"
        np.save(path, np.zeros((0, 0)))
        self.assertIsNone(load_matrix(path))

    def test_non_matrix_rejected(self):
        path = self.tmp / "cube.npy"
        np.save(path, np.zeros((2, 2, 2)))
        with self.assertRaises(ValueError):
            load_matrix(path)

    def test_hopfield_from_file(self):
        path = self.tmp / "weights.npy"
        np.save(path, self.matrix)
        system = HopfieldNet.from_file(path, key=jax.random.PRNGKey(0))
        self.assertEqual(system.n_nodes, 3)
        np.testing.assert_array_equal(system.params.Wij, self.matrix)

        np.save(self.tmp / "empty.npy", np.zeros((0, 0)))
        self.assertIsNone(HopfieldNet.from_file(self.tmp / "empty.npy"))


if __name__ == "__main__":
    unittest.main()
