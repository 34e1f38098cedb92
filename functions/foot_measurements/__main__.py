"""
Command line entry point: measure a foot photograph.

    python -m foot_measurements photo.jpg --qr-size-cm 5 --preview preview.png
"""

import argparse
import json
import logging
import sys

from . import bindings
from .config import TEMP_IMAGES_FOLDER
from .measurer import FootMeasurer

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Foot measurements from a photograph with a QR code scale reference',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the measurement vector
  python -m foot_measurements photo.jpg --qr-size-cm 5

  # Also write the annotated preview and keep intermediate images
  python -m foot_measurements photo.jpg --qr-size-cm 5 --preview out.png --verbose
        """
    )
    parser.add_argument('image', help='Path to the foot photograph')
    parser.add_argument('--qr-size-cm', type=float, required=True,
                        help='Real edge length of the printed QR code in centimeters')
    parser.add_argument('--preview', help='Write the annotated PNG preview to this path')
    parser.add_argument('--temp-folder', default=TEMP_IMAGES_FOLDER,
                        help='Folder for intermediate images in verbose mode')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging and intermediate images')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    measurer = FootMeasurer(temp_folder=args.temp_folder, verbose=args.verbose)
    processed = measurer.process_image(args.image, args.qr_size_cm)
    if processed.ok:
        vector = processed.value.measurements.as_vector()
    else:
        logger.error("%s: %s", processed.failure.value, processed.message)
        vector = [0.0] * bindings.VECTOR_LENGTH
    keys = ['length_cm', 'width_cm', 'heel_to_arch_cm', 'arch_to_toe_cm', 'big_toe_length_cm']
    result = dict(zip(keys, vector))
    result['is_calibrated'] = bool(vector[5])
    print(json.dumps(result, indent=2))

    if args.preview:
        if not processed.ok or not processed.value.contours:
            print("Error: no preview could be produced", file=sys.stderr)
            return 1
        rendered = measurer.render_report(processed.value)
        if not rendered.ok:
            print(f"Error: {rendered.message}", file=sys.stderr)
            return 1
        with open(args.preview, 'wb') as f:
            f.write(rendered.value)
    return 0 if any(vector[:5]) else 1


if __name__ == "__main__":
    sys.exit(main())
