"""多模块 POM 扫描器

从根 pom.xml 出发收集全部模块描述文件（含根）。

遍历使用显式栈，调用深度与模块树深度无关。visited 集合以规范化后的
文件路径为 key，是唯一的环路保护：同一模块被多个父模块声明、或模块
之间互相声明时，第二次出栈直接跳过。

单个节点的失败（模型构建失败、子模块 pom.xml 缺失）只记录 ScanWarning，
继续处理栈中其余节点。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mvnuploader.core.models import POM_FILENAME, ModuleDescriptorRef, ScanWarning
from mvnuploader.core.protocols import ModelResolver

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """扫描结果：按首次发现顺序排列的模块，以及非致命告警"""

    modules: list[ModuleDescriptorRef] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.modules)

    def __contains__(self, item: object) -> bool:
        return item in self.modules


class ModuleGraphScanner:
    """模块图扫描器"""

    def __init__(self, resolver: ModelResolver) -> None:
        self.resolver = resolver

    def scan(self, root: ModuleDescriptorRef | str | Path) -> ScanResult:
        if not isinstance(root, ModuleDescriptorRef):
            root = ModuleDescriptorRef.of(root)

        result = ScanResult()
        visited: dict[ModuleDescriptorRef, None] = {}
        stack: list[ModuleDescriptorRef] = [root]

        while stack:
            ref = stack.pop()
            if ref in visited:
                continue
            visited[ref] = None
            result.modules.append(ref)

            for child in self._children(ref, result.warnings):
                stack.append(child)

        logger.info(
            "共收集到 %d 个模块 POM 文件 (告警 %d 条)",
            len(result.modules), len(result.warnings),
        )
        return result

    def _children(
        self, ref: ModuleDescriptorRef, warnings: list[ScanWarning],
    ) -> list[ModuleDescriptorRef]:
        """解析当前节点声明的子模块；失败时记录告警并返回空列表"""
        try:
            model = self.resolver.build_effective_model(ref.path, process_plugins=False)
        except Exception as e:  # noqa: BLE001
            logger.exception("处理 POM 文件时发生错误: %s", ref)
            warnings.append(ScanWarning(str(ref), f"模型构建异常: {e}", kind="resolution"))
            return []

        if model is None:
            logger.warning("无法构建有效模型: %s", ref)
            warnings.append(ScanWarning(str(ref), "无法构建有效模型", kind="resolution"))
            return []

        base_dir = ref.base_dir
        if not base_dir.is_dir():
            logger.warning("POM 文件没有父目录: %s", ref)
            warnings.append(ScanWarning(str(ref), "POM 文件没有父目录", kind="resolution"))
            return []

        if model.modules:
            logger.debug("发现 %d 个子模块: %s", len(model.modules), ref)

        children = []
        for module in model.modules:
            module_pom = base_dir / module / POM_FILENAME
            if module_pom.is_file():
                logger.debug("添加子模块 POM: %s", module_pom)
                children.append(ModuleDescriptorRef.of(module_pom))
            else:
                logger.warning("子模块 POM 不存在: %s", module_pom)
                warnings.append(ScanWarning(str(module_pom), "子模块 POM 不存在"))
        return children
