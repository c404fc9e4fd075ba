"""
Chrest: the model that ties memory, perception and the visual-spatial field together.

Two clocks model resource contention. The learning clock records when LTM can
next be changed and the attention clock when the visual-spatial field can next
be used. Each clock holds "the time this resource becomes free". An operation
requested earlier than its clock allows is either skipped (learning) or
rejected (field operations); nothing waits.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np

from chrest.config import ChrestConfig
from chrest.exceptions import IllegalMoveError, ReinforcementError
from chrest.memory import Node, Stm
from chrest.patterns import ItemSquarePattern, ListPattern, Modality
from chrest.perception import DefaultFixationStrategy, FixationStrategy, Perceiver, Scene
from chrest.reinforcement import ReinforcementLearningTheory
from chrest.spatial import VisualSpatialField
from chrest.utils import ltm_to_networkx

logger = logging.getLogger(__name__)


class Chrest:
    """
    A CHREST model: discrimination network, STMs, clocks and perception.

    The model learns chunks by discrimination (adding nodes) and
    familiarisation (growing images). Recognition walks the network,
    descending through the first matching test link at each node.

    Attributes:
        config (ChrestConfig): Model parameters
        creation_time (int): Time the model was created
        perceiver (Perceiver): Scans scenes for the model
        visual_spatial_field (Optional[VisualSpatialField]): Most recent field
        visual_spatial_fields (Dict[int, VisualSpatialField]): Fields by creation time
        random_state (np.random.RandomState): Source of learning randomness
    """

    def __init__(self, config: Optional[ChrestConfig] = None, time: int = 0,
                 fixation_strategy: Optional[FixationStrategy] = None):
        """
        Initialize a model with empty memories.

        Args:
            config: Model parameters (defaults when omitted)
            time: Creation time; both clocks start here
            fixation_strategy: Strategy for the perceiver (central, then peripheral by default)
        """
        self.config = (config if config is not None else ChrestConfig()).validate()
        self.creation_time = time
        self._attention_clock = time
        self._learning_clock = time
        self.random_state = np.random.RandomState(self.config.random_seed)

        self._next_reference = 0
        self._ltm: Dict[Modality, Node] = {
            modality: self._create_node(ListPattern(modality=modality),
                                        ListPattern(modality=modality), time, root=True)
            for modality in Modality
        }
        self._stm: Dict[Modality, Stm] = {
            Modality.VISUAL: Stm(self.config.visual_stm_size),
            Modality.VERBAL: Stm(self.config.verbal_stm_size),
            Modality.ACTION: Stm(self.config.action_stm_size),
        }
        self._reinforcement_learning_theory: Optional[ReinforcementLearningTheory] = None

        if fixation_strategy is None:
            fixation_strategy = DefaultFixationStrategy(self.config.random_seed)
        self.perceiver = Perceiver(self, self.config.field_of_view, fixation_strategy)

        self.visual_spatial_field: Optional[VisualSpatialField] = None
        self.visual_spatial_fields: Dict[int, VisualSpatialField] = {}

    @classmethod
    def from_config(cls, time: int = 0, fixation_strategy: Optional[FixationStrategy] = None,
                    **overrides) -> "Chrest":
        """Create a model from default parameters with keyword overrides."""
        return cls(ChrestConfig().with_overrides(**overrides), time, fixation_strategy)

    # ------------------------------------------------------------------ clocks

    @property
    def attention_clock(self) -> int:
        return self._attention_clock

    @attention_clock.setter
    def attention_clock(self, time: int):
        if time < self._attention_clock:
            logger.debug("Attention clock kept at %d (asked for %d)", self._attention_clock, time)
            return
        logger.debug("Attention clock %d -> %d", self._attention_clock, time)
        self._attention_clock = time

    @property
    def learning_clock(self) -> int:
        return self._learning_clock

    @property
    def maximum_clock(self) -> int:
        return max(self._attention_clock, self._learning_clock)

    def attention_free(self, time: int) -> bool:
        return time >= self._attention_clock

    def learning_free(self, time: int) -> bool:
        return time >= self._learning_clock

    def _charge_learning(self, cost: int):
        logger.debug("Learning clock %d -> %d", self._learning_clock, self._learning_clock + cost)
        self._learning_clock += cost

    # ---------------------------------------------------------------- memories

    def get_ltm(self, modality: Union[Modality, ListPattern]) -> Node:
        """Root of the discrimination network for a modality (or a pattern's modality)."""
        if isinstance(modality, ListPattern):
            modality = modality.modality
        return self._ltm[modality]

    def get_stm(self, modality: Union[Modality, ListPattern]) -> Stm:
        if isinstance(modality, ListPattern):
            modality = modality.modality
        return self._stm[modality]

    @property
    def ltm_size(self) -> int:
        """Number of learned nodes across modalities (roots excluded)."""
        return sum(root.size() - 1 for root in self._ltm.values())

    def _create_node(self, contents: ListPattern, image: ListPattern, time: int,
                     root: bool = False) -> Node:
        node = Node(self._next_reference, contents, image, time, root=root)
        self._next_reference += 1
        return node

    # ------------------------------------------------------------- recognition

    def recognise(self, pattern: ListPattern, time: int) -> Node:
        """
        Sort pattern through the network.

        At each node the children are tried in order and the first link
        whose test matches what is left of the pattern is followed. Links
        learned after time are invisible.

        Args:
            pattern: Pattern to recognise
            time: Time of recognition

        Returns:
            Node: Deepest node reached (the root at least)
        """
        node = self.get_ltm(pattern)
        remaining = pattern
        descended = True
        while descended:
            descended = False
            for link in node.children:
                if link.creation_time <= time and link.passes(remaining):
                    node = link.child
                    remaining = remaining.remove(link.test)
                    descended = True
                    break
        return node

    def recognise_and_learn(self, pattern: ListPattern, time: int) -> Node:
        """
        Recognise pattern, then learn from it if the learning clock allows.

        The node recognised is put into STM. When learning is free at time,
        and the rho test passes, one learning step happens: familiarisation
        if the recognised image is a prefix of pattern, discrimination
        otherwise. Nothing is learned once the image equals the pattern.

        Args:
            pattern: Pattern to learn
            time: Time of the request

        Returns:
            Node: The node produced by learning, or the recognised node if
            nothing was learned
        """
        node = self.recognise(pattern, time)
        if pattern.is_empty():
            return node
        self.get_stm(pattern).add(node)

        if not self.learning_free(time):
            logger.debug("Learning busy until %d, %s not learned at %d",
                         self._learning_clock, pattern, time)
            return node
        if node.image == pattern:
            return node
        if self.random_state.random_sample() >= self.config.rho:
            logger.debug("Learning of %s refused by rho at %d", pattern, time)
            return node

        self._learning_clock = time
        if node.is_root() or not node.image.matches(pattern) or node.image.is_finished:
            learned = self._discriminate(node, pattern, time)
        else:
            learned = self._familiarise(node, pattern, time)

        self.get_stm(pattern).add(learned)
        return learned

    # ---------------------------------------------------------------- learning

    def _learn_primitive(self, primitive: ListPattern, time: int) -> Node:
        """Add a child of the root whose test is a single primitive."""
        test = primitive.clone()
        test.set_not_finished()
        root = self.get_ltm(test)
        child = self._create_node(test, ListPattern(modality=test.modality), time)
        root.add_child(test, child, time)
        self._charge_learning(self.config.discrimination_time)
        logger.debug("Learned primitive %s as node %d", test, child.reference)
        return child

    def _add_test(self, node: Node, test: ListPattern, time: int) -> Node:
        """Add a child to node reached through test. Known tests are not added twice."""
        if node.has_test(test):
            return node
        contents = test.clone() if node.is_root() else node.contents.append(test)
        child = self._create_node(contents, ListPattern(modality=contents.modality), time)
        node.add_child(test, child, time)
        self._charge_learning(self.config.discrimination_time)
        logger.debug("Discriminated node %d with test %s, new node %d",
                     node.reference, test, child.reference)
        return child

    def _discriminate(self, node: Node, pattern: ListPattern, time: int) -> Node:
        new_information = pattern.remove(node.contents)

        # Nothing left: test for the end of the pattern
        if new_information.is_empty():
            new_information.set_finished()
            if self.recognise(new_information, time).contents == new_information:
                return self._add_test(node, new_information, time)
            root = self.get_ltm(pattern)
            child = self._create_node(new_information, new_information.clone(), time)
            root.add_child(new_information, child, time)
            self._charge_learning(self.config.discrimination_time)
            return child

        retrieved = self.recognise(new_information, time)
        if retrieved.is_root():
            return self._learn_primitive(new_information.first_item(), time)
        if retrieved.contents.matches(new_information):
            return self._add_test(node, retrieved.contents.clone(), time)

        first = new_information.first_item()
        first.set_not_finished()
        return self._add_test(node, first, time)

    def _familiarise(self, node: Node, pattern: ListPattern, time: int) -> Node:
        remainder = pattern.remove(node.image)
        new_information = remainder.first_item()
        new_information.set_not_finished()

        if new_information.is_empty():
            if remainder.is_finished and not node.image.is_finished:
                image = node.image.clone()
                image.set_finished()
                node.set_image(image)
                self._charge_learning(self.config.familiarisation_time)
            return node

        if self.recognise(new_information, time).is_root():
            return self._learn_primitive(new_information, time)

        node.set_image(node.image.append(new_information))
        self._charge_learning(self.config.familiarisation_time)
        logger.debug("Familiarised node %d, image now %s", node.reference, node.image)
        return node

    # ------------------------------------------------------------ action links

    def add_action_link(self, node: Node, action_node: Node, time: int) -> bool:
        """
        Link a visual node to an action node with weight 0.0.

        Skipped when learning is busy at time. Costs add_link_time.

        Returns:
            bool: Whether the link was added
        """
        if not self.learning_free(time):
            logger.debug("Learning busy until %d, action link not added", self._learning_clock)
            return False
        if node.modality != Modality.VISUAL or not node.add_action_link(action_node):
            return False
        self._learning_clock = time
        self._charge_learning(self.config.add_link_time)
        return True

    def reinforce_action_link(self, node: Node, action_node: Node,
                              variables: Sequence[float], time: int) -> Optional[float]:
        """
        Reinforce the link from node to action_node using the active theory.

        Args:
            node: Visual node
            action_node: Action node
            variables: Variables for the theory
            time: Time of reinforcement

        Returns:
            Optional[float]: New weight, or None if no theory is set

        Raises:
            ReinforcementError: If variables do not fit the theory
        """
        theory = self._reinforcement_learning_theory
        if theory is None:
            logger.warning("No reinforcement learning theory set, link not reinforced at %d", time)
            return None
        if not theory.correct_number_of_variables(variables):
            raise ReinforcementError(
                f"{theory.name} expects {theory.number_of_variables} variables, got {len(variables)}"
            )
        return node.reinforce_action_link(action_node, theory.calculate_reinforcement_value(variables))

    @property
    def reinforcement_learning_theory(self) -> Optional[ReinforcementLearningTheory]:
        return self._reinforcement_learning_theory

    def set_reinforcement_learning_theory(self, theory: Union[str, ReinforcementLearningTheory, None]):
        """Set the theory once. Later calls (and None) are ignored."""
        if theory is None:
            return
        if self._reinforcement_learning_theory is not None:
            logger.warning("Reinforcement learning theory already %s, ignoring %s",
                           self._reinforcement_learning_theory.name, theory)
            return
        self._reinforcement_learning_theory = ReinforcementLearningTheory.from_name(theory)

    # ------------------------------------------------------ association links

    @staticmethod
    def _knows(node: Node, pattern: ListPattern) -> bool:
        """Whether node holds a non-empty image that starts pattern."""
        return not node.image.is_empty() and node.image.matches(pattern)

    def _link(self, node: Node, target: Node, time: int):
        if target.modality == Modality.ACTION and node.modality != Modality.ACTION:
            node.add_action_link(target)
        else:
            node.associated_node = target
        self._learning_clock = time
        self._charge_learning(self.config.add_link_time)

    def associate_and_learn(self, pattern: ListPattern, associate: ListPattern,
                            time: int) -> Optional[Node]:
        """
        Learn pattern and associate with each other, one step per call.

        Patterns of the same modality are joined through the associated node
        of pattern's node. An action pattern is joined through an action link
        instead. Until pattern is known it is learned. Once it is known, a
        link whose image fits associate is refined by learning. A wrong or
        missing link is replaced when learning is free and associate is known.

        Args:
            pattern: Cue pattern
            associate: Pattern to associate with the cue
            time: Time of the request

        Returns:
            Optional[Node]: The node recognised for pattern, or None when the
            modalities cannot be associated
        """
        to_action = associate.modality == Modality.ACTION and pattern.modality != Modality.ACTION
        if pattern.modality != associate.modality and not to_action:
            logger.warning("Cannot associate %s with %s", pattern.modality.name,
                           associate.modality.name)
            return None

        node = self.recognise(pattern, time)
        if not self._knows(node, pattern):
            self.recognise_and_learn(pattern, time)
            return node

        if to_action:
            targets = list(node.action_links)
        else:
            targets = [node.associated_node] if node.associated_node is not None else []

        matching = [target for target in targets if target.image.matches(associate)]
        if matching:
            for target in matching:
                if target.image == associate:
                    self.recognise_and_learn(pattern, time)
                else:
                    self.recognise_and_learn(associate, time)
            return node

        if targets:
            self.recognise_and_learn(associate, time)
            self.recognise_and_learn(pattern, time)
        elif not self._knows(self.recognise(associate, time), associate):
            self.recognise_and_learn(associate, time)

        if self.learning_free(time):
            target = self.recognise(associate, time)
            if self._knows(target, associate):
                self._link(node, target, time)
        return node

    def learn_and_name_patterns(self, pattern: ListPattern, name: ListPattern, time: int) -> bool:
        """
        Learn a visual pattern and a verbal name, then name the first by the second.

        The naming link joins the nodes at the front of visual and verbal STM
        and costs add_link_time. It is only made when learning is still free
        after both patterns were presented.

        Returns:
            bool: Whether the naming link was made
        """
        self.recognise_and_learn(pattern, time)
        self.recognise_and_learn(name, time)
        if pattern.modality != Modality.VISUAL or name.modality != Modality.VERBAL:
            return False
        if not self.learning_free(time):
            return False

        visual_stm = self.get_stm(Modality.VISUAL)
        verbal_stm = self.get_stm(Modality.VERBAL)
        if visual_stm.is_empty() or verbal_stm.is_empty():
            return False
        named, naming = visual_stm.item(0), verbal_stm.item(0)
        if named.is_root() or naming.is_root():
            return False

        named.named_by = naming
        self._learning_clock = time
        self._charge_learning(self.config.add_link_time)
        return True

    def recall_pattern(self, pattern: ListPattern, time: int) -> ListPattern:
        """Image of the node pattern is recognised as."""
        return self.recognise(pattern, time).image.clone()

    def associate_pattern(self, pattern: ListPattern, time: int) -> Optional[ListPattern]:
        """Image of the node associated with pattern's node, if any."""
        associated = self.recognise(pattern, time).associated_node
        return associated.image.clone() if associated is not None else None

    def name_pattern(self, pattern: ListPattern, time: int) -> Optional[ListPattern]:
        """Image of the verbal node naming pattern's node, if any."""
        naming = self.recognise(pattern, time).named_by
        return naming.image.clone() if naming is not None else None

    # -------------------------------------------------------------- perception

    def scan_scene(self, scene: Scene, number_fixations: int, time: int,
                   clear_stm: bool = True, verbose: bool = False) -> Scene:
        """
        Scan scene and return what can be recalled from visual STM.

        Args:
            scene: Scene to scan
            number_fixations: Fixation budget
            time: Time of the scan
            clear_stm: Empty visual STM first
            verbose: Print progress

        Returns:
            Scene: The recalled scene
        """
        if clear_stm:
            self.get_stm(Modality.VISUAL).clear()
        self.perceiver.clear()
        self.perceiver.scan(scene, number_fixations, time, verbose=verbose)
        return self.recall_scene(scene, time)

    def recall_scene(self, scene: Scene, time: int) -> Scene:
        """
        Rebuild scene from the images in visual STM.

        Squares no chunk covers are blind. Locations in images are relative
        to the creator when the scene has one.
        """
        recalled = Scene(f"Recalled {scene.name} @ {time}", scene.width, scene.height)
        creator = scene.location_of_creator()
        offset = (0, 0)
        if creator is not None:
            offset = creator
            contents = scene.get_square_contents(*creator)
            recalled.add_creator(creator[0], creator[1], contents.identifier)

        for node in self.get_stm(Modality.VISUAL):
            for item in node.image:
                if not isinstance(item, ItemSquarePattern):
                    continue
                col, row = item.column + offset[0], item.row + offset[1]
                if not scene.in_bounds(col, row) or (col, row) == creator:
                    continue
                reality = scene.get_square_contents(col, row)
                identifier = reality.identifier if reality.object_class == item.item else item.item
                recalled.add_object(col, row, identifier, item.item)
        return recalled

    def learn_scene_and_action(self, scene: Scene, action: ListPattern,
                               number_fixations: int, time: int) -> int:
        """
        Scan scene, learn action, then link every chunk seen to the action.

        Each visual STM node gets an action link to the node at the front of
        action STM. Every new link adds add_link_time to the learning clock.

        Args:
            scene: Scene the action was taken in
            action: Action pattern
            number_fixations: Fixation budget
            time: Time of the scan

        Returns:
            int: Number of links added
        """
        self.scan_scene(scene, number_fixations, time)
        self.recognise_and_learn(action, time)

        action_stm = self.get_stm(Modality.ACTION)
        if action_stm.is_empty() or action_stm.item(0).is_root():
            return 0
        action_node = action_stm.item(0)

        added = 0
        for node in self.get_stm(Modality.VISUAL):
            if not node.is_root() and node.add_action_link(action_node):
                self._charge_learning(self.config.add_link_time)
                added += 1
        logger.debug("Linked %d chunks of %s to %s", added, scene.name, action)
        return added

    def action_predictions(self, scene: Scene, number_fixations: int,
                           time: int) -> Dict[ListPattern, Tuple[float, int]]:
        """
        Scan scene and tally the actions linked to the chunks in visual STM.

        Returns:
            Dict[ListPattern, Tuple[float, int]]: Summed link weight and
            number of linking chunks per action image, in order of discovery
        """
        self.scan_scene(scene, number_fixations, time)
        tally: Dict[ListPattern, Tuple[float, int]] = {}
        for node in self.get_stm(Modality.VISUAL):
            for action_node, weight in node.action_links.items():
                if action_node.image.is_empty():
                    continue
                total, count = tally.get(action_node.image, (0.0, 0))
                tally[action_node.image] = (total + weight, count + 1)
        return tally

    def predict_action(self, scene: Scene, number_fixations: int, time: int) -> Optional[ListPattern]:
        """
        Action suggested by what is seen in scene.

        The action with the largest summed link weight wins. Ties go to the
        action linked from most chunks, then to the first one found.

        Returns:
            Optional[ListPattern]: The predicted action, or None when no
            chunk seen links to one
        """
        tally = self.action_predictions(scene, number_fixations, time)
        if not tally:
            return None
        best = max(tally, key=lambda image: tally[image])
        return best.clone()

    # ---------------------------------------------------- visual-spatial field

    def create_visual_spatial_field(self, scene: Scene,
                                    object_encoding_time: int,
                                    empty_square_encoding_time: int,
                                    access_time: int,
                                    object_movement_time: int,
                                    recognised_object_lifespan: int,
                                    unrecognised_object_lifespan: int,
                                    number_fixations: int,
                                    time: int,
                                    encode_ghost_objects: bool = False,
                                    encode_creator: bool = True) -> Optional[VisualSpatialField]:
        """
        Build a visual-spatial field of scene if attention is free at time.

        Returns:
            Optional[VisualSpatialField]: The new field, or None if attention is busy

        Raises:
            DuplicateIdentifierError: If the scene would give two live objects one identifier
        """
        if not self.attention_free(time):
            logger.warning("Attention busy until %d, no visual-spatial field created at %d",
                           self._attention_clock, time)
            return None

        field = VisualSpatialField(
            self, scene, object_encoding_time, empty_square_encoding_time, access_time,
            object_movement_time, recognised_object_lifespan, unrecognised_object_lifespan,
            number_fixations, time, encode_ghost_objects, encode_creator,
        )
        self.visual_spatial_field = field
        self.visual_spatial_fields[time] = field
        return field

    def move_objects_in_visual_spatial_field(self, moves: Sequence[Sequence], time: int) -> int:
        """
        Apply a batch of moves to the current visual-spatial field.

        Returns:
            int: Time the moves finished

        Raises:
            IllegalMoveError: If there is no field or the batch is illegal
        """
        if self.visual_spatial_field is None:
            raise IllegalMoveError("No visual-spatial field to move objects in")
        return self.visual_spatial_field.move_objects(moves, time)

    # ----------------------------------------------------------------- export

    def ltm_as_graph(self, modality: Optional[Modality] = None) -> nx.DiGraph:
        """Discrimination network(s) as a directed graph of node references."""
        modalities: List[Modality] = list(Modality) if modality is None else [modality]
        graph = nx.DiGraph()
        for m in modalities:
            graph = nx.compose(graph, ltm_to_networkx(self._ltm[m]))
        return graph

    def __repr__(self):
        return (f"Chrest(ltm_size={self.ltm_size}, attention_clock={self._attention_clock}, "
                f"learning_clock={self._learning_clock})")
