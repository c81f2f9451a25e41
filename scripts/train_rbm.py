"""Train an RBM with CD-k on a binary data set."""
from argparse import ArgumentParser
import logging
import time
import yaml
import numpy as np
import h5py
from rbm_cd.configuration import Configuration
from rbm_cd.model import RBM


def load_data(path):
    if path.endswith('.npy'):
        data = np.load(path)
    else:
        with h5py.File(path, 'r') as source:
            data = source['data'][()]
    return data.reshape(data.shape[0], -1).astype(np.float64)


if __name__ == '__main__':
    parser = ArgumentParser(prog='train_rbm.py')
    parser.add_argument('conf', metavar='PATH',
                        help='Path to a yaml file containing the training configuration.')
    parser.add_argument('data', metavar='PATH',
                        help='Training data (.npy, or HDF5 with a "data" dataset).')
    parser.add_argument('-o', '--out', metavar='PATH', default='rbm.h5', help='Output file path.')
    parser.add_argument('--log-level', metavar='LEVEL', default='INFO', help='Logging level.')
    options = parser.parse_args()

    log_level = getattr(logging, options.log_level.upper())
    logging.basicConfig(level=log_level, format='%(asctime)s:%(name)s:%(levelname)s %(message)s')

    with open(options.conf, 'r', encoding='utf-8') as source:
        conf = Configuration.from_dict(yaml.load(source, yaml.Loader))

    data = load_data(options.data)
    logging.info('Training a %d-%d RBM on %d examples with CD-%d, learning rate %.3g',
                 conf.n_visible, conf.n_hidden, data.shape[0], conf.k, conf.learning_rate)

    model = RBM.create(conf.n_visible, conf.n_hidden, seed=conf.seed, momentum=conf.momentum,
                       l2=conf.l2, use_regularization=conf.use_regularization)
    start = time.time()
    result = model.train_till_convergence(conf.learning_rate, conf.k, data,
                                          **conf.optimizer_options())
    logging.info('Training took %.2f seconds.', time.time() - start)

    with h5py.File(options.out, 'w') as output:
        conf.save(output)
        model.params.save(output.create_group('parameters'))
        output.create_dataset('losses', data=np.array(result.losses))
        output.attrs['converged'] = result.converged

    logging.info('Output written at %s. Normal exit.', options.out)
