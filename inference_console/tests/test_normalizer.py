import pytest

from src.core.errors import ProcessingError
from src.core.normalizer import normalize_response
from src.core.types import Keypoint


def test_failure_uses_server_error_message():
    with pytest.raises(ProcessingError) as exc_info:
        normalize_response({'success': False, 'error': 'x'})

    assert exc_info.value.message == 'x'


def test_failure_without_message_uses_default():
    with pytest.raises(ProcessingError) as exc_info:
        normalize_response({'success': False})

    assert exc_info.value.message == 'Image processing failed'


def test_missing_image_is_a_processing_error():
    with pytest.raises(ProcessingError) as exc_info:
        normalize_response({'success': True, 'detections': []})

    assert exc_info.value.code == 'MISSING_PROCESSED_IMAGE'


def test_non_object_payload_is_a_processing_error():
    with pytest.raises(ProcessingError):
        normalize_response(['not', 'an', 'object'])


def test_success_builds_data_uri_and_empty_detections():
    result = normalize_response({'success': True, 'image': 'AAA', 'detections': []})

    assert result.processed_image == 'data:image/jpeg;base64,AAA'
    assert result.detections == ()


def test_absent_detections_default_to_empty():
    result = normalize_response({'success': True, 'image': 'AAA'})

    assert result.detections == ()


def test_detection_defaults_for_absent_mask_center_and_keypoints():
    result = normalize_response(
        {
            'success': True,
            'image': 'AAA',
            'detections': [{'box': [1, 2, 3, 4], 'class': 'berry', 'confidence': 0.5}],
        }
    )

    detection = result.detections[0]
    assert detection.box == (1.0, 2.0, 3.0, 4.0)
    assert detection.class_name == 'berry'
    assert detection.confidence == 0.5
    assert detection.mask_center is None
    assert detection.keypoints == ()


def test_detection_with_mask_center_and_keypoints():
    result = normalize_response(
        {
            'success': True,
            'image': 'AAA',
            'detections': [
                {
                    'box': [10, 20, 50, 80],
                    'class': 'berry',
                    'confidence': 0.953,
                    'mask_center': [30, 50],
                    'keypoints': [
                        {'id': 1, 'x': 31, 'y': 49, 'confidence': 0.88},
                        {'id': 2, 'x': 33, 'y': 51, 'confidence': 0.5},
                    ],
                }
            ],
        }
    )

    detection = result.detections[0]
    assert detection.mask_center == (30.0, 50.0)
    assert detection.keypoints == (
        Keypoint(id=1, x=31.0, y=49.0, confidence=0.88),
        Keypoint(id=2, x=33.0, y=51.0, confidence=0.5),
    )


def test_malformed_box_becomes_none():
    result = normalize_response(
        {'success': True, 'image': 'AAA', 'detections': [{'box': None, 'class': 'berry', 'confidence': 0.4}]}
    )

    assert result.detections[0].box is None


@pytest.mark.parametrize('raw_id', [float('nan'), float('inf'), float('-inf'), 'seven', True])
def test_unusable_keypoint_id_falls_back_to_position(raw_id):
    result = normalize_response(
        {
            'success': True,
            'image': 'AAA',
            'detections': [
                {
                    'box': [0, 0, 2, 2],
                    'class': 'berry',
                    'confidence': 0.5,
                    'keypoints': [{'id': 4, 'x': 0, 'y': 0, 'confidence': 0.1}, {'id': raw_id, 'x': 1, 'y': 1}],
                }
            ],
        }
    )

    assert [kp.id for kp in result.detections[0].keypoints] == [4, 1]


def test_non_finite_numbers_are_treated_as_missing():
    result = normalize_response(
        {
            'success': True,
            'image': 'AAA',
            'detections': [
                {
                    'box': [0, 0, float('inf'), 2],
                    'class': 'berry',
                    'confidence': float('nan'),
                    'mask_center': [float('nan'), 1],
                    'keypoints': [
                        {'id': 1, 'x': 1, 'y': 1, 'confidence': float('nan')},
                        {'id': 2, 'x': float('inf'), 'y': 1, 'confidence': 0.3},
                    ],
                }
            ],
        }
    )

    detection = result.detections[0]
    assert detection.box is None
    assert detection.confidence is None
    assert detection.mask_center is None
    assert detection.keypoints == (Keypoint(id=1, x=1.0, y=1.0, confidence=0.0),)
