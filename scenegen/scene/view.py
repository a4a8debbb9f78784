"""
View state for the upload and result panels.
The page renders whatever snapshot ``ViewState.to_dict`` returns.
"""
from dataclasses import dataclass, asdict

IDLE_LABEL = "Generate Scene"
LOADING_LABEL = "Generating..."


@dataclass
class ViewState:
    """Visibility and control flags for a single page."""
    loading: bool = False
    trigger_enabled: bool = False
    trigger_label: str = IDLE_LABEL
    preview_visible: bool = False
    upload_placeholder_visible: bool = True
    result_visible: bool = False
    result_placeholder_visible: bool = True

    @property
    def progress_visible(self) -> bool:
        return self.loading

    def set_loading(self, is_loading: bool):
        """
        Toggle between Idle and Loading.

        Loading shows the progress indicator and disables the trigger.
        Leaving Loading always re-enables the trigger with its original label.
        """
        self.loading = is_loading
        if is_loading:
            self.trigger_enabled = False
            self.trigger_label = LOADING_LABEL
        else:
            self.trigger_enabled = True
            self.trigger_label = IDLE_LABEL

    def show_preview(self):
        self.preview_visible = True
        self.upload_placeholder_visible = False
        if not self.loading:
            self.trigger_enabled = True

    def hide_result(self):
        self.result_visible = False
        self.result_placeholder_visible = False

    def show_result(self):
        self.result_visible = True
        self.result_placeholder_visible = False

    def show_result_placeholder(self):
        self.result_visible = False
        self.result_placeholder_visible = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["progress_visible"] = self.progress_visible
        return data
