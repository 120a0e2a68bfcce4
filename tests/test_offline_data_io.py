"""Unit tests for writing and reading the offline data of a TransientRBEvaluation.

This module contains tests that verify:
- a write/read cycle into a fresh evaluation reproduces the online results for every basis size;
- the temporal discretization and the key of the cached residual terms are restored;
- the manifest content;
- missing, corrupt and inconsistent data are reported with the offending file, leaving the evaluation untouched;
- a failed overwrite of saved data cannot be read back.
"""

import json
import os

import numpy as np
import pytest

import rb_transient.utils.array_utils as arr_utils
import rb_transient.rb_library.rb_evaluation.offline_data_io as odio
from rb_transient.utils.errors import OfflineDataError


@pytest.fixture
def saved_problem(random_problem, tmp_path):
    """Random problem with N_max = 3, solved with N = 3 and saved in a temporary directory"""
    data = random_problem(N_max=3, euler_theta=0.5)
    data.evaluation.solve(3)
    directory = str(tmp_path / "offline_data")
    data.evaluation.write_offline_data_to_files(directory)
    return data, directory


def _edit_manifest(directory, **entries):
    manifest_path = os.path.join(directory, odio.MANIFEST_FILE)
    with open(manifest_path, 'r') as fp:
        manifest = json.load(fp)
    manifest.update(entries)
    with open(manifest_path, 'w') as fp:
        json.dump(manifest, fp)


def test_round_trip_reproduces_online_results(saved_problem):
    data, directory = saved_problem
    fresh = data.make_evaluation()

    fresh.read_offline_data_from_files(directory)

    assert fresh.get_n_basis_functions() == 3
    for N in range(1, 4):
        data.evaluation.solve(N)
        fresh.solve(N)
        np.testing.assert_allclose(fresh.RB_temporal_solution_data, data.evaluation.RB_temporal_solution_data,
                                   rtol=1e-13, atol=1e-15)
        np.testing.assert_allclose(fresh.error_bound_all_k, data.evaluation.error_bound_all_k, rtol=1e-12,
                                   atol=1e-15)
        np.testing.assert_allclose(fresh.RB_outputs_all_k, data.evaluation.RB_outputs_all_k, rtol=1e-13,
                                   atol=1e-15)


def test_round_trip_restores_initial_conditions(saved_problem):
    data, directory = saved_problem
    fresh = data.make_evaluation()

    fresh.read_offline_data_from_files(directory)

    assert len(fresh.RB_initial_condition_all_N) == 3
    for saved, read in zip(data.evaluation.RB_initial_condition_all_N, fresh.RB_initial_condition_all_N):
        np.testing.assert_array_equal(read, saved)
    np.testing.assert_array_equal(fresh.initial_L2_error_all_N, data.evaluation.initial_L2_error_all_N)


def test_round_trip_restores_temporal_discretization(saved_problem):
    data, directory = saved_problem
    fresh = data.make_evaluation()
    fresh.temporal_discretization.set_delta_t(1.0)
    fresh.temporal_discretization.set_euler_theta(1.0)
    fresh.temporal_discretization.set_n_time_steps(2)

    fresh.read_offline_data_from_files(directory)

    assert fresh.temporal_discretization.delta_t == 0.05
    assert fresh.temporal_discretization.euler_theta == 0.5
    assert fresh.temporal_discretization.n_time_steps == 6
    assert fresh.temporal_discretization.time_step == 0


def test_round_trip_restores_cached_residual_terms(saved_problem):
    data, directory = saved_problem
    fresh = data.make_evaluation()

    fresh.read_offline_data_from_files(directory)

    assert fresh.lti_cache.key == data.evaluation.lti_cache.key
    assert fresh.lti_cache.is_valid_for(fresh.get_parameters(), 3)
    assert fresh.lti_cache.Fq_term == data.evaluation.lti_cache.Fq_term
    np.testing.assert_array_equal(fresh.lti_cache.Aq_Mq_matrix, data.evaluation.lti_cache.Aq_Mq_matrix)


def test_round_trip_without_cached_residual_terms(random_problem, tmp_path):
    data = random_problem(N_max=2)
    directory = str(tmp_path / "offline_data")
    data.evaluation.write_offline_data_to_files(directory)

    fresh = data.make_evaluation()
    fresh.read_offline_data_from_files(directory)

    assert fresh.lti_cache.key is None
    assert not os.path.exists(odio.artifact_path(directory, 'cached_Fq_term'))
    fresh.solve(2)
    data.evaluation.solve(2)
    np.testing.assert_allclose(fresh.error_bound_all_k, data.evaluation.error_bound_all_k, rtol=1e-12, atol=1e-15)


def test_manifest_content(saved_problem):
    _, directory = saved_problem

    manifest = odio.read_manifest(directory)

    assert manifest['format'] == odio.FORMAT_NAME
    assert manifest['version'] == odio.FORMAT_VERSION
    assert manifest['N'] == 3
    assert (manifest['Q_a'], manifest['Q_f'], manifest['Q_m'], manifest['Q_l']) == (2, 2, 2, [2, 1])
    assert manifest['n_outputs'] == 2
    assert manifest['delta_t'] == 0.05
    assert manifest['lti_cache']['N'] == 3
    for name in ('RB_Aq_vector', 'Aq_Mq_norms', 'RB_initial_condition', 'output_1_dual_innerprods'):
        assert name in manifest['artifacts']
        assert os.path.isfile(odio.artifact_path(directory, name))


def test_saved_arrays_declare_their_shapes(saved_problem):
    _, directory = saved_problem

    assert arr_utils.read_shape_header(odio.artifact_path(directory, 'Aq_Mq_norms')) == (2, 2, 3, 3)
    assert arr_utils.read_shape_header(odio.artifact_path(directory, 'Mq_Mq_norms')) == (3, 3, 3)
    assert arr_utils.read_shape_header(odio.artifact_path(directory, 'Fq_norms')) == (3,)


def test_missing_directory(random_problem, tmp_path):
    data = random_problem(N_max=2)

    with pytest.raises(OfflineDataError):
        data.make_evaluation().read_offline_data_from_files(str(tmp_path / "missing"))


def test_missing_file(saved_problem):
    data, directory = saved_problem
    os.remove(odio.artifact_path(directory, 'Aq_Mq_norms'))

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)

    assert exc_info.value.artifact == 'Aq_Mq_norms.txt'


def test_missing_manifest(saved_problem):
    data, directory = saved_problem
    os.remove(os.path.join(directory, odio.MANIFEST_FILE))

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)

    assert exc_info.value.artifact == odio.MANIFEST_FILE


def test_wrong_shape(saved_problem):
    data, directory = saved_problem
    arr_utils.save_array(np.zeros((2, 2)), odio.artifact_path(directory, 'RB_L2_matrix'))

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)

    assert exc_info.value.artifact == 'RB_L2_matrix.txt'


def test_corrupt_file(saved_problem):
    data, directory = saved_problem
    with open(odio.artifact_path(directory, 'Fq_Mq_norms'), 'w') as fp:
        fp.write("not an array\n")

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)

    assert exc_info.value.artifact == 'Fq_Mq_norms.txt'


def test_non_finite_values(saved_problem):
    data, directory = saved_problem
    values = np.ones((2, 3))
    values[1, 2] = np.nan
    arr_utils.save_array(values, odio.artifact_path(directory, 'RB_Fq_vector'))

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)

    assert exc_info.value.artifact == 'RB_Fq_vector.txt'


@pytest.mark.parametrize("entries", [{'Q_a': 3}, {'Q_l': [2]}, {'n_outputs': 1}, {'version': 2},
                                     {'format': 'other'}, {'N': -1}, {'euler_theta': 2.0}, {'N': 2.5},
                                     {'n_time_steps': 2.5}, {'Q_l': [1.5, 1]}, {'Q_f': True}])
def test_inconsistent_manifest(saved_problem, entries):
    data, directory = saved_problem
    _edit_manifest(directory, **entries)

    with pytest.raises(OfflineDataError):
        data.make_evaluation().read_offline_data_from_files(directory)


def test_failed_read_leaves_evaluation_untouched(saved_problem, random_problem):
    _, directory = saved_problem
    os.remove(odio.artifact_path(directory, 'RB_initial_condition'))

    other = random_problem(N_max=2, seed=1, delta_t=0.1)
    evaluation = other.evaluation
    evaluation.solve(2)
    RB_Aq_vector = evaluation.RB_Aq_vector
    Aq_Mq_norms = np.copy(evaluation.Aq_Mq_representor_innerprods)
    cache_key = evaluation.lti_cache.key

    with pytest.raises(OfflineDataError):
        evaluation.read_offline_data_from_files(directory)

    assert evaluation.get_n_basis_functions() == 2
    assert evaluation.RB_Aq_vector is RB_Aq_vector
    np.testing.assert_array_equal(evaluation.Aq_Mq_representor_innerprods, Aq_Mq_norms)
    assert evaluation.temporal_discretization.delta_t == 0.1
    assert evaluation.lti_cache.key == cache_key
    assert all(len(representors) == 2 for representors in evaluation.Aq_representor)


def test_manifest_entry_rejects_non_integral_values():
    manifest = {'N': 3.0, 'n_time_steps': 2.5, 'Q_l': [1, 2.5], 'delta_t': 0.1, 'flag': False}

    assert odio.manifest_entry(manifest, 'N') == 3
    assert odio.manifest_entry(manifest, 'delta_t', float) == 0.1
    for key, entry_type in (('n_time_steps', int), ('Q_l', list), ('flag', int), ('missing', int)):
        with pytest.raises(OfflineDataError) as exc_info:
            odio.manifest_entry(manifest, key, entry_type)
        assert exc_info.value.artifact == odio.MANIFEST_FILE


def test_failed_overwrite_cannot_be_read(saved_problem, random_problem, monkeypatch):
    """Overwriting offline data with a write that fails midway leaves no readable mixture of old and new files"""
    data, directory = saved_problem
    other = random_problem(N_max=3, seed=1)

    save_array = arr_utils.save_array

    def failing_save_array(array, file_name, *args, **kwargs):
        if file_name.endswith('RB_M_q_vector' + odio.ARTIFACT_EXTENSION):
            raise ValueError("Disk full")
        return save_array(array, file_name, *args, **kwargs)

    monkeypatch.setattr(arr_utils, 'save_array', failing_save_array)

    with pytest.raises(OfflineDataError) as exc_info:
        other.evaluation.write_offline_data_to_files(directory)
    assert exc_info.value.artifact == 'RB_M_q_vector.txt'

    monkeypatch.undo()
    assert not os.path.exists(os.path.join(directory, odio.MANIFEST_FILE))

    with pytest.raises(OfflineDataError) as exc_info:
        data.make_evaluation().read_offline_data_from_files(directory)
    assert exc_info.value.artifact == odio.MANIFEST_FILE
