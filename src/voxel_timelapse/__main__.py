import sys

from voxel_timelapse.main import main

if __name__ == "__main__":
    sys.exit(main())
