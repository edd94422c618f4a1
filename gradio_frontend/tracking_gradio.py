from __future__ import annotations

from typing import Optional

import gradio as gr
from gradio import themes

from gradio_frontend.mvc.controller import TrackingWebController
from tracking_core.config import AppConfig, load_config
from tracking_core.log import setup_logging

PAGE_CSS = """
/* 画布与视频背景置黑，与清屏颜色一致 */
video, canvas { background: #000000 !important; }
#controls_col { border-right: 1px solid #e5e7eb; padding-right: 12px; }
#output_col { padding-left: 12px; }
@media (max-width: 768px) {
    /* 移动端去掉分割线，避免拥挤 */
    #controls_col { border-right: none; padding-right: 0; }
    #output_col { padding-left: 0; }
}
"""


def build_ui(config: Optional[AppConfig] = None) -> gr.Blocks:
    cfg = config or AppConfig()
    controller = TrackingWebController(cfg)
    with gr.Blocks(title="实时姿态/手部追踪") as demo:
        gr.Markdown(
            """
            ## 使用方法
            1. 点击「开始」并允许浏览器使用摄像头。<br>
            2. 勾选「手部模式」或「全身模式」（二选一）。<br>
            3. 全身模式下可勾选「显示角度」，超过 90° 的关节角以红色标出。
            """
        )

        with gr.Row():
            with gr.Column(scale=1, elem_id="controls_col"):
                webcam = gr.Image(
                    label="摄像头",
                    sources=["webcam"],
                    streaming=True,
                    type="numpy",
                    height=cfg.overlay.height // 2,
                )
                with gr.Row():
                    start_btn = gr.Button("开始", variant="primary")
                    stop_btn = gr.Button("停止", variant="secondary")
                with gr.Row():
                    hands_chk = gr.Checkbox(label="手部模式", value=False)
                    holistic_chk = gr.Checkbox(label="全身模式", value=False)
                    angles_chk = gr.Checkbox(label="显示角度", value=cfg.overlay.show_angles)
                status_text = gr.Textbox(label="状态", interactive=False, lines=1)

            with gr.Column(scale=2, elem_id="output_col"):
                output = gr.Image(label="叠加画面", interactive=False, height=cfg.overlay.height)

        start_btn.click(fn=controller.start, inputs=[], outputs=[status_text])

        def on_stop():
            return controller.stop(), None

        stop_btn.click(fn=on_stop, inputs=[], outputs=[status_text, output])

        # 用 input 而不是 change：程序回写复选框时不会再次触发切换
        def on_hands(enabled: bool):
            return controller.set_hands_mode(enabled)

        def on_holistic(enabled: bool):
            return controller.set_holistic_mode(enabled)

        hands_chk.input(fn=on_hands, inputs=[hands_chk], outputs=[hands_chk, holistic_chk])
        holistic_chk.input(fn=on_holistic, inputs=[holistic_chk], outputs=[hands_chk, holistic_chk])
        angles_chk.input(fn=controller.set_show_angles, inputs=[angles_chk], outputs=[])

        webcam.stream(
            fn=controller.process,
            inputs=[webcam],
            outputs=[output],
            stream_every=cfg.frontend.tick_interval_ms / 1000.0,
            concurrency_limit=1,
        )

        with gr.Accordion("提示", open=False):
            gr.Markdown(
                """
                - 两种模式都未勾选时只显示原始画面。
                - 推理未完成时到达的帧会被跳过，画面可能出现短暂停顿。
                - 身体关键点不完整时，对应部位（左/右臂、左/右腿）的角度不显示。
                """
            )
    return demo


def launch(config: Optional[AppConfig] = None):
    cfg = config or load_config()
    setup_logging(cfg.log_level)
    demo = build_ui(cfg)
    demo.launch(
        server_name=cfg.frontend.server_name,
        server_port=cfg.frontend.server_port,
        theme=themes.Soft(primary_hue="blue", neutral_hue="slate"),
        css=PAGE_CSS,
    )


if __name__ == "__main__":
    launch()
