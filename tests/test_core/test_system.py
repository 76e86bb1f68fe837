"""Test the Bunch container, System validation and display metadata."""

import unittest

import jax
import jax.numpy as jnp
import numpy as np

jax.config.update("jax_enable_x64", True)

from bdmodels import Bunch, DisplayConfig, HopfieldNet, NeuralNetDDE, System
from bdmodels.core.display import DEFAULT_PANELS
from bdmodels.solvers import Euler, Heun


class TestBunch(unittest.TestCase):

    def test_attribute_access(self):
        params = Bunch(b=1.0, tau=10.0)
        self.assertEqual(params.tau, 10.0)
        params.b = 2.0
        self.assertEqual(params["b"], 2.0)
        del params.b
        self.assertNotIn("b", params)
        with self.assertRaises(AttributeError):
            params.missing

    def test_copy_is_independent(self):
        params = Bunch(tau=10.0)
        other = params.copy()
        other.tau = 1.0
        self.assertIsInstance(other, Bunch)
        self.assertEqual(params.tau, 10.0)

    def test_pytree(self):
        params = Bunch(tau=jnp.array(2.0), Iapp=jnp.ones(3))
        doubled = jax.tree.map(lambda x: 2 * x, params)
        self.assertIsInstance(doubled, Bunch)
        np.testing.assert_array_equal(doubled.Iapp, 2 * jnp.ones(3))

        grads = jax.grad(lambda p: jnp.sum(p.Iapp) * p.tau)(params)
        self.assertEqual(float(grads.tau), 3.0)
        np.testing.assert_array_equal(grads.Iapp, jnp.full(3, 2.0))


class TestSystem(unittest.TestCase):

    def setUp(self):
        self.params = Bunch(Wij=jnp.zeros((3, 3)), Iapp=jnp.zeros(3), b=1.0, tau=10.0)

    def test_basic_properties(self):
        system = System(HopfieldNet(), self.params, jnp.zeros(3), solvers=(Euler(),))
        self.assertEqual(system.n_nodes, 3)
        self.assertFalse(system.is_delayed)
        self.assertEqual(system.max_lag, 0.0)
        self.assertIsNone(system.flat_lags)
        self.assertEqual(system.tspan, (0.0, 100.0))
        self.assertIsNone(system.display)
        self.assertIn("HopfieldNet", repr(system))

    def test_vector_field_is_pure_dynamics(self):
        system = System(HopfieldNet(), self.params, jnp.ones(3))
        dV = system.vector_field(0.0, system.initial_state, system.params)
        np.testing.assert_allclose(dV, -jnp.ones(3) / 10.0)

    def test_state_validation(self):
        with self.assertRaises(ValueError):
            System(HopfieldNet(), self.params, jnp.zeros((3, 1)))
        with self.assertRaises(ValueError):
            System(HopfieldNet(), self.params, jnp.zeros(0))
        with self.assertRaises(ValueError):
            System(HopfieldNet(), self.params, jnp.zeros(4))

    def test_missing_parameter(self):
        params = self.params.copy()
        del params["Iapp"]
        with self.assertRaises(ValueError):
            System(HopfieldNet(), params, jnp.zeros(3))

    def test_lags_must_match_model(self):
        with self.assertRaises(ValueError):
            System(HopfieldNet(), self.params, jnp.zeros(3), lags=jnp.ones((3, 3)))

        dde_params = Bunch(Kij=jnp.zeros((2, 2)), a=0.5, Ie=jnp.zeros(2), tau=10.0)
        with self.assertRaises(ValueError):
            System(NeuralNetDDE(), dde_params, jnp.zeros(2))

        system = System(NeuralNetDDE(), dde_params, jnp.zeros(2), lags=jnp.eye(2))
        self.assertTrue(system.is_delayed)
        self.assertEqual(system.max_lag, 1.0)
        np.testing.assert_array_equal(system.flat_lags, jnp.array([1.0, 0.0, 0.0, 1.0]))

    def test_replace(self):
        system = HopfieldNet.system(jnp.zeros((2, 2)), key=jax.random.PRNGKey(0))
        longer = system.replace(tspan=(0.0, 500.0), solvers=(Heun(),))
        self.assertEqual(longer.tspan, (0.0, 500.0))
        self.assertIsInstance(longer.solvers[0], Heun)
        self.assertEqual(system.tspan, (0.0, 200.0))
        np.testing.assert_array_equal(longer.initial_state, system.initial_state)

        with self.assertRaises(ValueError):
            system.replace(initial_state=jnp.zeros(5))
        with self.assertRaises(ValueError):
            system.replace(n_nodes=5)


class TestDisplayConfig(unittest.TestCase):

    def test_defaults(self):
        display = DisplayConfig()
        self.assertEqual(display.title, "Equations")
        self.assertEqual(display.latex, ())
        self.assertEqual(display.panels, DEFAULT_PANELS)

    def test_equality(self):
        self.assertEqual(DisplayConfig(latex=["a"]), DisplayConfig(latex=("a",)))
        self.assertNotEqual(DisplayConfig(latex=["a"]), DisplayConfig(latex=["b"]))

    def test_models_provide_display(self):
        system = NeuralNetDDE.system(3)
        self.assertIsInstance(system.display, DisplayConfig)
        self.assertTrue(len(system.display.latex) > 0)


if __name__ == "__main__":
    unittest.main()
