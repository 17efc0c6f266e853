import gradio as gr
import numpy as np
import PIL.Image

from voxel_timelapse import constants
from voxel_timelapse.builder import build_house_scene
from voxel_timelapse.camera import CameraOrbit
from voxel_timelapse.daynight import DayNightModel
from voxel_timelapse.output import to_uint8
from voxel_timelapse.tiles import TileRenderer
from voxel_timelapse.tracer import RayTracer

# Keep the previous frame visible while the next one renders.
CSS = """
.gradio-container { background-color: #0b0f19 !important; color: #e5e7eb !important; }
#output_img { background-color: #0b0f19 !important; border-radius: 8px; overflow: hidden; border: none !important; }
#output_img img { object-fit: contain; }
.generating, .pending { opacity: 1 !important; filter: none !important; transition: none !important; }
.loading, .progress-view, .loader, .spinner { display: none !important; visibility: hidden !important; }
"""

DEFAULTS = [0.5, 0.0, constants.ORBIT_BASE_RADIUS, constants.MAX_DEPTH, True, 480]


def render_preview(renderer, day_night, orbit, time_of_day, orbit_deg, radius,
                   depth, tonemap, resolution):
    """Render one preview frame as a uint8 (H, W, 3) array (16:9)."""
    width = int(resolution)
    height = max(1, int(round(width * 9 / 16)))
    env = day_night.evaluate(time_of_day)
    camera = orbit.pose(np.deg2rad(orbit_deg), radius, aspect=width / height)

    frame = renderer.render(env, camera, width, height, depth=int(depth))
    return to_uint8(frame, tonemap=tonemap)


def create_ui(workers=constants.DEFAULT_WORKERS):

    renderer = TileRenderer(RayTracer(build_house_scene()), workers=workers)
    day_night = DayNightModel()
    orbit = CameraOrbit()

    def render_frame(time_of_day, orbit_deg, radius, depth, tonemap, resolution):
        image_data = render_preview(renderer, day_night, orbit, time_of_day, orbit_deg,
                                    radius, depth, tonemap, resolution)
        return PIL.Image.fromarray(image_data)

    with gr.Blocks(title="Voxel Timelapse") as demo:

        gr.Markdown("# Voxel Timelapse: Preview")
        gr.Markdown("Scrub the day/night cycle and camera orbit before rendering a full run.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### ☀️ Time of Day")
                    time_slider = gr.Slider(minimum=0, maximum=1, value=DEFAULTS[0], step=0.005,
                                            label="Time of Day",
                                            info="0 = midnight, 0.25 = sunrise, 0.5 = noon, 0.75 = sunset")

                with gr.Group():
                    gr.Markdown("### 🎥 Camera Orbit")
                    angle_slider = gr.Slider(minimum=0, maximum=360, value=DEFAULTS[1], step=1,
                                             label="Orbit Angle (deg)")
                    radius_slider = gr.Slider(minimum=6, maximum=40, value=DEFAULTS[2], step=0.5,
                                              label="Orbit Radius", info="Distance from the house")

                with gr.Group():
                    gr.Markdown("### ⚙️ Quality")
                    depth_slider = gr.Slider(minimum=0, maximum=5, value=DEFAULTS[3], step=1,
                                             label="Reflection Depth")
                    tonemap_toggle = gr.Checkbox(value=DEFAULTS[4], label="ACES Tonemap")
                    res_slider = gr.Slider(minimum=160, maximum=960, value=DEFAULTS[5], step=160,
                                           label="Render Width", info="Lower for speed, higher for quality")
                    reset_btn = gr.Button("🔄 Reset", variant="secondary")

            with gr.Column(scale=2):
                output_img = gr.Image(label="Viewport", interactive=False, elem_id="output_img")

        inputs = [time_slider, angle_slider, radius_slider, depth_slider, tonemap_toggle, res_slider]

        def reset_view():
            return list(DEFAULTS)

        reset_btn.click(fn=reset_view, outputs=inputs)

        for input_comp in inputs:
            input_comp.change(fn=render_frame, inputs=inputs, outputs=output_img,
                              trigger_mode="always_last", show_progress="hidden")

        demo.load(fn=render_frame, inputs=inputs, outputs=output_img, show_progress="hidden")

    return demo


if __name__ == "__main__":
    demo = create_ui()
    demo.launch(css=CSS)
